from .extract_video import ExtractVideoUseCase
from .inspect_token import InspectionReport, InspectTokenUseCase

__all__ = ["ExtractVideoUseCase", "InspectTokenUseCase", "InspectionReport"]
