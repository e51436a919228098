# 📄 File: patient_api/modules/consultation/domain/catalog.py
# 🧭 Purpose (Layman Explanation):
# The full questionnaire: every page of the consultation in the order the patient visits them,
# with the exact wording of each question and its answer choices.
# 🧪 Purpose (Technical Summary):
# Static, ordered module catalog. Module order defines consultation routing and progress;
# module ids are the keys under which responses are stored.
# 🔗 Dependencies:
# consultation question/module domain models
# 🔄 Connected Modules / Calls From:
# progress service, response service, Greene scale scoring, document builder, consultation API

from typing import Dict, List, Optional

from patient_api.modules.consultation.domain.models.question import (
    ConsultationModule,
    Question,
    QuestionType,
)

SUMMARY_ROUTE = "/consultation/summary"
MODULE_ROUTE_PREFIX = "/consultation/module-"

SYMPTOM_TEXT_MAX_LENGTH = 500


def _symptom(question_id: str, question: str, options: List[str]) -> Question:
    return Question(
        id=question_id,
        type=QuestionType.MULTIPLE_CHOICE,
        question=question,
        options=options,
        required=True,
    )


def _symptom_details(question_id: str, question: str) -> Question:
    return Question(id=question_id, question=question, max_length=SYMPTOM_TEXT_MAX_LENGTH)


MODULE_1 = ConsultationModule(
    id="module_1",
    route="/consultation/module-1",
    title="Personal Information",
    page_title="Your Symptom Snapshot",
    questions=[
        _symptom_details(
            "top_three_symptoms",
            "What are your top three symptoms that you desperately need help with?",
        ),
        _symptom("hot_flushes", "Have you been experiencing any hot flushes over the past few months?", [
            "No hot flushes at all",
            "Some occasional hot flushes with only a very mild impact on my life",
            "Regular hot flushes with a moderate impact on my life",
            "Severe hot flushes that are having a serious impact on my life",
        ]),
        _symptom("light_headedness", "Have you been experiencing any feelings of light headedness over the past months?", [
            "No, I have not been experiencing any new feeling of light headedness",
            "Yes I have experienced some mild new light headedness",
            "I have been experiencing light headedness that is having a moderate impact on my life",
            "I have been experiencing new light headedness which is severe",
        ]),
        _symptom("headaches", "Have you been experiencing more headaches than normal over the past months?", [
            "No, I have not had more headaches than normal",
            "I have had some extra headaches - a mild amount more than normal",
            "I have had a moderate number of extra headaches with a moderate impact on my life",
            "I have been having quite a few extra headaches",
        ]),
        _symptom("irritability", "Have you been more irritable over the past few months than normal?", [
            "No - just my usual amount of irritability",
            "I have been mildly more irritable",
            "I have been moderately more irritable",
            "Yes, I have been severely more irritable",
        ]),
        _symptom("depression", "Have you felt more depressed over the past few months than before?", [
            "No, I have not felt any extra depression",
            "Yes I have been mildly more depressed",
            "I have been moderately more depressed than previously",
            "My depression is much more severe than previously",
        ]),
        _symptom("unloved", "Have you felt more unloved over the past few months than previously?", [
            "No, I have felt as loved as normal",
            "I have felt mildly more unloved than previously",
            "I have felt moderately more unloved than previously",
            "I have felt severely more unloved than previously",
        ]),
        _symptom("anxiety", "Have you felt more anxious over the past few months than you normally would?", [
            "No - my anxiety level has been the same",
            "Yes I am a small amount more anxious than previously. Mild",
            "I am moderately more anxious than previously",
            "I am severely more anxious than previously",
        ]),
        _symptom(
            "mood_fluctuations",
            "Has your mood fluctuated more over the past few months than normal? Have you had more mood changes?",
            [
                "No, my mood fluctuates as normal",
                "I have a mild increase in mood fluctuations",
                "My mood is fluctuating quite a bit more than normal",
                "I am having severe mood fluctuations compared to normal",
            ],
        ),
        _symptom("sleeplessness", "Have you been suffering from sleeplessness more over the past few months than normal?", [
            "No, my sleep is the same as normal",
            "I am having a mild amount of extra sleeplessness compared to normal",
            "I am having a moderate amount of extra sleeplessness compared to normal",
            "My sleep has been severely affected",
        ]),
        _symptom_details(
            "sleeplessness_details",
            "If you have been having more sleeplessness than normal, please explain what this is like for you. "
            "Do you have trouble falling asleep? Do you wake up earlier in the morning? Are you waking up for no "
            "reason in the middle of the night and having trouble falling back to sleep?",
        ),
        _symptom("tiredness", "Have you been suffering from any unusual tiredness over the past few months?", [
            "No, I am experiencing the same amount of tiredness as before",
            "I have been mildly more tired than previously",
            "I have been moderately more tired than previously",
            "I have been severely more tired than previously",
        ]),
        _symptom(
            "backaches",
            "Have you been suffering from any new backaches over the past months which are not the result of "
            "an injury or easily explained?",
            [
                "No, I have not been experiencing any new backaches",
                "I have been experiencing some mild new backaches compared to normal",
                "I have been having moderately more back aches than usual",
                "I have been having many more backaches than normal which are affecting my life",
            ],
        ),
        _symptom(
            "joint_pains",
            "Have you been suffering from any new joint pains over the past months which are not the result of "
            "an injury or easily explained?",
            [
                "No, I have not been experiencing any new joint pains",
                "I have had some mild new joint pains",
                "I have had some joint pains which are moderately affecting my life",
                "I have had new joint pains which are severely affecting my life",
            ],
        ),
        _symptom_details(
            "joint_pains_details",
            "If you have been having any new joint pains, please explain where these are and what they are like. "
            "Are they constant or do they come and go. Are they sharp or achey. Do certain activities bring them on?",
        ),
        _symptom(
            "muscle_pains",
            "Have you been suffering from any new muscle pains which are not the result of an injury or easily explained?",
            [
                "No, I have not been suffering from any new muscle pains",
                "I have been experiencing some new mild muscle pains",
                "I have been experiencing some new muscle pains which are having a moderate impact on my life",
                "I have been experiencing some muscle pains which are having a severe impact on my life",
            ],
        ),
        _symptom_details(
            "muscle_pains_details",
            "If you have been having new muscle pains, please explain what these are like. When are they worse? "
            "What are they like? Are they constant or do they come and go? What makes them feel better?",
        ),
        _symptom("facial_hair", "Have you noticed an increase in facial hair over the past few months?", [
            "No, I have not noticed any new facial hair",
            "I have noticed a mild increase in facial hair",
            "I have noticed a moderate increase in facial hair",
            "I have noticed a severe increase in facial hair",
        ]),
        _symptom("skin_dryness", "Has your skin felt more dry over the past few months?", [
            "No, my skin has felt the same as it normally does",
            "My skin is experiencing some mild extra dryness",
            "My skin is moderately more dry than previously",
            "My skin is severely more dry than previously",
        ]),
        _symptom(
            "crawling_skin",
            "Over the past few months have you noticed any new feelings of crawling under the skin or on the skin?",
            [
                "No, I have not noticed any new feelings of crawling under or on my skin",
                "I have had some new mild feelings of crawling under my skin",
                "I have had some moderate feelings of crawling under my skin",
                "I have been experiencing some severe feelings of crawling under my skin",
            ],
        ),
        _symptom(
            "sex_drive",
            "Over the past few months have you felt a reduction in your sex drive? That is, less sexual feelings?",
            [
                "No, my sex drive is the same as normal",
                "I have had a mild reduction in my sex drive",
                "I have experienced a moderate reduction in my sex drive",
                "I have experienced a severe reduction in my sex drive",
            ],
        ),
        _symptom(
            "vaginal_dryness",
            "Over the past months have you felt that your vagina is more dry or irritated than previously?",
            [
                "No, my vagina feels the same as normal",
                "I have been experiencing some mild vaginal dryness or irritation",
                "My vagina is moderately more irritated or dry than normal",
                "My vagina is severely more dry or irritated than normal",
            ],
        ),
        _symptom(
            "intercourse_comfort",
            "Over the past months have you found intercourse more uncomfortable than previously?",
            [
                "No, intercourse is the same level of comfort as always",
                "Intercourse is mildly more uncomfortable than normal",
                "Intercourse is moderately more uncomfortable than normal",
                "Intercourse is severely more uncomfortable than normal",
            ],
        ),
        _symptom(
            "urination_frequency",
            "Over the past months has there been an increase in the frequency of urination?",
            [
                "No, my urine frequency is the same as it normally is",
                "I have had a mild increase in the frequency of urination",
                "My urine frequency has increased moderately",
                "My urine frequency has increased severely",
            ],
        ),
        _symptom("brain_fog", "Over the past months has there been an increase in brain fog?", [
            "No, I do not feel any more foggy than normal",
            "I have had a mild increase in brain fog",
            "My brain fog has increased moderately",
            "My brain fog has increased severely",
        ]),
    ],
)

MODULE_2A = ConsultationModule(
    id="module_2a",
    route="/consultation/module-2a",
    title="Health History: Getting to know you",
    page_title="Your Health History: Getting to know you",
    questions=[
        Question(
            id="chronic_disease",
            question=(
                "Have you ever been diagnosed with a chronic disease? For example, epilepsy, diabetes, asthma, "
                "kidney disease? If so please document the current management for these diseases."
            ),
            section="Your health at a top level",
        ),
        Question(
            id="current_medications",
            question=(
                "What medications are you currently taking. Please write down the name of the medication, "
                "the dosage and how frequently you take this medication."
            ),
            section="Your health at a top level",
        ),
        Question(
            id="supplements",
            question=(
                "Are you taking any supplements? Please note down the name of the supplement, the dose, "
                "how often you take it and why you are taking it."
            ),
            section="Your health at a top level",
        ),
        Question(
            id="medication_allergies",
            question="Do you have any allergies or reactions to medications?",
            section="Your health at a top level",
        ),
    ],
)

_GYNAE = "Gynaecological History"

MODULE_2B = ConsultationModule(
    id="module_2b",
    route="/consultation/module-2b",
    title="Gynaecological History",
    page_title="Gynaecological History",
    questions=[
        Question(
            id="last_menstrual_period",
            question=(
                "Do you know the date of the start of your last menstrual period? Please note this down. "
                "If not, give an estimate of a month and a year."
            ),
            section=_GYNAE,
        ),
        Question(
            id="period_changes",
            question="If you are still having periods, have they changed? Are the periods heavier?",
            section=_GYNAE,
        ),
        Question(
            id="contraception",
            question="What contraception are you currently using? How are you finding it.",
            section=_GYNAE,
        ),
        Question(
            id="last_cervical_screening",
            question="What is the date of your last cervical screening?",
            section=_GYNAE,
        ),
        Question(
            id="endometriosis",
            question="Have you ever been diagnosed with endometriosis? If so, what treatment did you receive?",
            section=_GYNAE,
        ),
        Question(
            id="pcos",
            question=(
                "Have you ever been diagnosed with polycystic ovarian syndrome? "
                "If so, what treatment did you receive?"
            ),
            section=_GYNAE,
        ),
        Question(
            id="gynaecological_procedures",
            question=(
                "Have you had any gynaecological procedures? Hysterectomy? Surgery for fallopian tube removal "
                "or ovarian cyst management? Hysteroscopy? For what reasons?"
            ),
            section=_GYNAE,
        ),
        Question(id="pregnancies", question="How many pregnancies did you have?", section=_GYNAE),
        Question(id="delivery_dates", question="What are the dates of your deliveries?", section=_GYNAE),
        Question(
            id="other_gynaecological",
            question="Any other relevant gynaecological information?",
            section=_GYNAE,
        ),
        Question(
            id="menopause_family_history",
            question="Do you know the age at which your mother or sisters started their menopause journey?",
            section=_GYNAE,
        ),
    ],
)

MODULE_2C = ConsultationModule(
    id="module_2c",
    route="/consultation/module-2c",
    title="Family and Personal Cancer History",
    page_title="Family and Personal Cancer History",
    questions=[
        Question(
            id="last_mammogram",
            question="What is the date of your last mammogram?",
            section="Family and Personal Breast Cancer History",
        ),
        Question(
            id="family_breast_cancer",
            question="Do you have any family history of breast cancer, either in males or females",
            section="Family and Personal Breast Cancer History",
        ),
        Question(
            id="breast_cancer_ages",
            question="How old was each of those relatives when they were diagnosed with breast cancer?",
            section="Family and Personal Breast Cancer History",
        ),
        Question(
            id="family_bowel_cancer",
            question="Has anyone in your family been diagnosed with bowel cancer?",
            section="Bowel cancer history",
        ),
        Question(
            id="bowel_cancer_ages",
            question="How old was each of those relatives when they were diagnosed with bowel cancer?",
            section="Bowel cancer history",
        ),
    ],
)

MODULE_2D = ConsultationModule(
    id="module_2d",
    route="/consultation/module-2d",
    title="Cardiovascular, Bone and Mental Health",
    page_title="Cardiovascular, Bone and Mental Health",
    questions=[
        Question(
            id="blood_clot_history",
            question="Have you ever had a blood clot? If so, please give details.",
            section="Cardiovascular Health",
        ),
        Question(
            id="cardiovascular_conditions",
            question="Have you ever been diagnosed with high blood pressure, high cholesterol or had a stroke?",
            section="Cardiovascular Health",
        ),
        Question(
            id="family_heart_disease",
            question="Do you or any of your family have a history of heart disease? If so, please give details.",
            section="Cardiovascular Health",
        ),
        Question(
            id="osteoporosis_diagnosis",
            question="Have you been diagnosed with osteoporosis?",
            section="Bone Health",
        ),
        Question(
            id="bone_fractures",
            question="Have you ever had a bone fracture which occurred without a serious accident or fall?",
            section="Bone Health",
        ),
        Question(
            id="bone_density_screening",
            question="Have you ever had a bone density screening?",
            section="Bone Health",
        ),
        Question(
            id="family_osteoporosis",
            question="Do you have a family history of osteoporosis?",
            section="Bone Health",
        ),
        Question(
            id="mental_health",
            question=(
                "How is your mental health at the moment? Is there anything you would like the doctor to know "
                "about your personal or family history of mental health?"
            ),
            section="Mental Health",
        ),
    ],
)

MODULE_3 = ConsultationModule(
    id="module_3",
    route="/consultation/module-3",
    title="Medical History",
    page_title="Investigations",
    questions=[
        Question(
            id="investigation_questions",
            question=(
                "Do you have any specific questions for your doctor about investigations? "
                "If so, please write them here."
            ),
            section="Investigations",
        ),
    ],
)

MODULE_4 = ConsultationModule(
    id="module_4",
    route="/consultation/module-4",
    title="Lifestyle Factors",
    page_title="Menopause Medical Treatments: Your Guide to Feeling Fantastic!",
    questions=[
        Question(
            id="doctor_questions",
            question=(
                "Do you have any specific questions for your doctor or thoughts that you wish to discuss? "
                "If so, please write them here."
            ),
            section="Questions for Doctor",
        ),
    ],
)

MODULE_5 = ConsultationModule(
    id="module_5",
    route="/consultation/module-5",
    title="Treatment Preferences",
    page_title="Your questions",
    questions=[
        Question(
            id="other_questions",
            question=(
                "Do you have any other questions that you would like to ask the doctor? "
                "Here is a good place to record them."
            ),
            section="Questions",
        ),
    ],
)

# Informational page, nothing to answer
MODULE_6 = ConsultationModule(
    id="module_6",
    route="/consultation/module-6",
    title="Helpful Hints",
    page_title="Helpful Hints",
)

CONSULTATION_MODULES: List[ConsultationModule] = [
    MODULE_1,
    MODULE_2A,
    MODULE_2B,
    MODULE_2C,
    MODULE_2D,
    MODULE_3,
    MODULE_4,
    MODULE_5,
    MODULE_6,
]

_MODULES_BY_ID: Dict[str, ConsultationModule] = {module.id: module for module in CONSULTATION_MODULES}


def get_module(module_id: str) -> Optional[ConsultationModule]:
    return _MODULES_BY_ID.get(module_id)
