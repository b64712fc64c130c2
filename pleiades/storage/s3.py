"""S3-compatible object storage client for PLEIADES deployments."""

from pleiades.client.models import ClientConfig


def create_s3_client(config: ClientConfig):
    """Build a boto3 S3 client with path-style addressing.

    No request is sent here; boto3 only contacts the endpoint when a
    client method is called.
    """
    # Lazy import keeps boto3 out of the import path of the HTTP client
    import boto3
    from botocore.config import Config

    return boto3.client(
        "s3",
        region_name=config.s3_region,
        endpoint_url=config.s3_endpoint,
        aws_access_key_id=config.s3_access_key,
        aws_secret_access_key=config.s3_secret_key,
        config=Config(s3={"addressing_style": "path"}),
    )
