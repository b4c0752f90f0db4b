from enum import Enum


class MergeOperation(str, Enum):
    """
    Operation tag of a content merge request.
    """
    STAPLE = "Staple"
    CLIP = "Clip"
