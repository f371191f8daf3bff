from nutrilife.models.schemas import ActivityLevel, Gender, UserProfile

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

# Mifflin-St Jeor sex constant; "other" takes the midpoint of male/female
SEX_CONSTANTS = {
    Gender.MALE: 5,
    Gender.FEMALE: -161,
    Gender.OTHER: -78,
}


class HealthMetrics:
    def __init__(self, profile: UserProfile):
        self.gender = profile.gender
        self.height = profile.height
        self.age = profile.age
        self.weight = profile.weight
        self.activity_level = profile.activity_level

    def get_bmi(self):
        """Body Mass Index (kg / m^2)"""
        height_m = self.height / 100
        return self.weight / (height_m ** 2)

    def bmi_category(self):
        bmi = self.get_bmi()
        if bmi < 18.5:
            return "underweight"
        elif bmi < 25:
            return "normal"
        elif bmi < 30:
            return "overweight"
        return "obese"

    def get_bmr(self):
        """Basal Metabolic Rate (Mifflin-St Jeor)"""
        return 10 * self.weight + 6.25 * self.height - 5 * self.age + SEX_CONSTANTS[self.gender]

    def get_tdee(self):
        """Calculate Total Daily Energy Expenditure (TDEE)"""
        return self.get_bmr() * ACTIVITY_MULTIPLIERS[self.activity_level]

    def as_dict(self):
        return {
            "bmi": round(self.get_bmi(), 1),
            "bmi_category": self.bmi_category(),
            "bmr": round(self.get_bmr()),
            "tdee": round(self.get_tdee()),
            "activity_level": self.activity_level.value,
        }
