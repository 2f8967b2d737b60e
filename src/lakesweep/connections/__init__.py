"""
AWS connections: the statement-execution service and backing-data storage.
"""

from lakesweep.connections.base import BaseAwsConnection
from lakesweep.connections.redshift_data import RedshiftDataConnection
from lakesweep.connections.s3 import S3LocationResolver, parse_s3_location

__all__ = [
    "BaseAwsConnection",
    "RedshiftDataConnection",
    "S3LocationResolver",
    "parse_s3_location",
]
