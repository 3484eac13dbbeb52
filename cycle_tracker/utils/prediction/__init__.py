"""
Prediction service utilities package.
"""
from .client import PredictionClient
from .fingerprint import generate_data_hash
from .parsers import clean_response, extract_content, parse_prediction
from .prompts import build_system_prompt, build_user_message

__all__ = [
    "PredictionClient",
    "generate_data_hash",
    "clean_response",
    "extract_content",
    "parse_prediction",
    "build_system_prompt",
    "build_user_message"
]
