from app.client.consumer import ConsumerStatus, QuizClient, QuizStreamConsumer
from app.client.files import LocalFile, PreparedUpload, prepare_files

__all__ = [
    "ConsumerStatus",
    "QuizClient",
    "QuizStreamConsumer",
    "LocalFile",
    "PreparedUpload",
    "prepare_files",
]
