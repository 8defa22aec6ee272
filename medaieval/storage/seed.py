from __future__ import annotations

from medaieval.models import Resource, ResourceType, Specialty

SPECIALTIES: list[Specialty] = [
    Specialty(name="Cardiology", description="Heart failure, arrhythmias, ischemic heart disease, and valvular disorders."),
    Specialty(name="Respiratory", description="Asthma, COPD, pneumonia, pulmonary embolism, and respiratory failure."),
    Specialty(name="Neurology", description="Stroke, seizures, dementia, headache, and neurodegenerative disorders."),
    Specialty(name="Gastroenterology", description="IBD, liver disease, pancreatitis, and GI bleeding disorders."),
    Specialty(name="Endocrinology", description="Diabetes, thyroid disorders, adrenal disease, and pituitary disorders."),
    Specialty(
        name="Nephrology",
        description="Acute kidney injury, chronic kidney disease, glomerulonephritis, and electrolyte disorders.",
    ),
]

RESOURCES: list[Resource] = [
    Resource(
        type=ResourceType.guideline,
        title="Acute Coronary Syndromes Management",
        description="Management of acute coronary syndromes, including STEMI, NSTEMI, and unstable angina.",
        url="https://www.nice.org.uk/guidance/cg94",
        organization="NICE Guidelines",
        tags=["Cardiology", "Emergency Medicine"],
    ),
    Resource(
        type=ResourceType.guideline,
        title="Stroke and TIA Management",
        description="Diagnosis and management of stroke and transient ischaemic attacks.",
        url="https://www.nice.org.uk/guidance/ng128",
        organization="NICE Guidelines",
        tags=["Neurology", "Stroke"],
    ),
    Resource(
        type=ResourceType.guideline,
        title="Asthma Diagnosis and Management",
        description="Diagnosing, monitoring and managing asthma in adults, children and young people.",
        url="https://www.nice.org.uk/guidance/ng80",
        organization="British Thoracic Society",
        tags=["Respiratory", "Asthma"],
    ),
    Resource(
        type=ResourceType.questionbank,
        title="BMJ OnExamination",
        description="Question bank covering the UK medical finals and UKMLA syllabus.",
        url="https://www.onexamination.com",
        publisher="BMJ",
    ),
    Resource(
        type=ResourceType.ukmla,
        title="UKMLA Content Map",
        description="The GMC content map describing the core knowledge assessed by the UKMLA.",
        url="https://www.gmc-uk.org/education/medical-licensing-assessment",
        organization="General Medical Council",
    ),
]
