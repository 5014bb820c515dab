from enum import Enum


class JobType(str, Enum):
    CONVERT = "convert"
    EXTRACT_AUDIO = "extract_audio"
    COMPRESS_VIDEO = "compress_video"
    CREATE_GIF = "create_gif"
    THUMBNAIL = "thumbnail"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
