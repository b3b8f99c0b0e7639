# grade_engine/core/config.py
"""Engine configuration using Pydantic."""
from pydantic_settings import BaseSettings
from typing import List


class GradingSettings(BaseSettings):
    APP_NAME: str = "grade-engine"
    LOG_LEVEL: str = "INFO"

    # Standard scales
    DEFAULT_SCALE: str = "cbse"
    SEED_SCALES: List[str] = ["cbse", "state", "icse"]
    PROTECTED_ID_SUFFIX: str = "-default"

    # Validation
    WARN_ON_GRADE_POINT_ORDER: bool = True

    model_config = {
        'env_prefix': 'GRADING_',
        'env_file': '.env',
        'extra': 'ignore'
    }


settings = GradingSettings()
