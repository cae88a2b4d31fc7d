import mimetypes
from flask import current_app
import boto3
from botocore.client import Config
import requests

DEFAULT_AUDIO_MIME = "audio/webm"


def is_audio_reference(value) -> bool:
    """True when an answer value points into the audio storage path."""
    if not isinstance(value, str):
        return False
    marker = current_app.config.get('AUDIO_PATH_MARKER') or ''
    v = value.strip()
    if not marker or marker not in v:
        return False
    return v.startswith(('http://', 'https://', 's3://', 'file://'))


def guess_audio_mime(url: str) -> str:
    path = url.split('?', 1)[0]
    guessed = mimetypes.guess_type(path)[0]
    if guessed and guessed.startswith('audio/'):
        return guessed
    # browsers record webm; .webm maps to video/webm in mimetypes
    return DEFAULT_AUDIO_MIME


def _s3_client():
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config.get('S3_ACCESS_KEY'),
        aws_secret_access_key=current_app.config.get('S3_SECRET_KEY'),
        config=Config(signature_version='s3v4'),
        **s3_kwargs,
    )


def download_bytes(url: str) -> bytes:
    if url.startswith('s3://'):
        bucket, key = url.replace('s3://', '', 1).split('/', 1)
        obj = _s3_client().get_object(Bucket=bucket, Key=key)
        return obj['Body'].read()
    elif url.startswith('file://'):
        path = url.replace('file://', '', 1)
        with open(path, 'rb') as f:
            return f.read()
    elif url.startswith(('http://', 'https://')):
        r = requests.get(url, timeout=current_app.config.get('AUDIO_FETCH_TIMEOUT', 30))
        r.raise_for_status()
        return r.content
    else:
        raise ValueError("Unsupported URL scheme")
