from enum import Enum

class ReplyMode(str, Enum):
    ECHO = "ECHO"
    FIXED = "FIXED"
