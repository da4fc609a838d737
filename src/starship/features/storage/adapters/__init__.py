from .s3_adapter import S3ObjectStorage

__all__ = ["S3ObjectStorage"]
