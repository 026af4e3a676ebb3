"""
Shared constants for MediVoice application.
"""

DEFAULT_LANGUAGE = "english"

# Language tags accepted for consultations, mapped to ISO 639-1 codes
LANGUAGE_CODES = {
    "english": "en",
    "yoruba": "yo",
    "igbo": "ig",
    "hausa": "ha",
}

# Persisted as the user message of a greeting turn
GREETING_PLACEHOLDER = "Session started"

# Assistant reply when the completion call fails outright
FALLBACK_COMPLETION_TEXT = "AI service temporarily unavailable."

# Assistant reply when the model returns an empty completion
EMPTY_COMPLETION_TEXT = "No response generated."

DEFAULT_SEVERITY = "moderate"

DEFAULT_SPEAKER = "idera"

# Built-in doctor personas offered to patients
DOCTOR_CATALOG = [
    {
        "id": 1,
        "name": "Dr. Adaeze Okafor",
        "specialty": "General Physician",
        "description": "Helps with everyday health concerns, fever, malaria and common symptoms.",
        "voice_id": "idera",
    },
    {
        "id": 2,
        "name": "Dr. Tunde Bakare",
        "specialty": "Pediatrician",
        "description": "Expert in children's health, from babies to teens.",
        "voice_id": "idera",
    },
    {
        "id": 3,
        "name": "Dr. Amina Bello",
        "specialty": "Dermatologist",
        "description": "Handles skin issues like rashes, acne, or infections.",
        "voice_id": "idera",
    },
    {
        "id": 4,
        "name": "Dr. Chinedu Eze",
        "specialty": "Psychologist",
        "description": "Supports mental health, stress, anxiety and emotional well-being.",
        "voice_id": "idera",
    },
    {
        "id": 5,
        "name": "Dr. Folake Adeyemi",
        "specialty": "Nutritionist",
        "description": "Provides advice on healthy eating, diet and weight management.",
        "voice_id": "idera",
    },
    {
        "id": 6,
        "name": "Dr. Ibrahim Musa",
        "specialty": "Cardiologist",
        "description": "Focuses on heart health, chest pain and blood pressure concerns.",
        "voice_id": "idera",
    },
    {
        "id": 7,
        "name": "Dr. Ngozi Nwosu",
        "specialty": "Gynecologist",
        "description": "Cares for women's reproductive health, pregnancy and menstrual issues.",
        "voice_id": "idera",
    },
    {
        "id": 8,
        "name": "Dr. Segun Ajayi",
        "specialty": "ENT Specialist",
        "description": "Treats ear, nose and throat problems, sinus pain and hearing issues.",
        "voice_id": "idera",
    },
    {
        "id": 9,
        "name": "Dr. Halima Sani",
        "specialty": "Family Medicine",
        "description": "Provides ongoing care for the whole family across all ages.",
        "voice_id": "idera",
    },
]
