"""
Publish the linking report to Google Cloud Storage
Creates a static website that can be shared via URL
"""

import argparse
import logging
import os
import sys

from google.cloud import storage
from google.cloud.exceptions import NotFound

from config import REPORT_BUCKET, REPORT_DIR, REPORT_FILENAME

logger = logging.getLogger(__name__)


def deploy_report(bucket_name, report_path, storage_client=None):
    """
    Upload the report to a GCS bucket as index.html.

    Args:
        bucket_name: Name of the GCS bucket (must be globally unique)
        report_path: Path to the generated report HTML file
        storage_client: Optional storage.Client (created if not given)

    Returns the public URL of the uploaded page.
    """
    if not os.path.exists(report_path):
        raise FileNotFoundError(f"Report not found: {report_path}. Run build_report.py first.")

    storage_client = storage_client or storage.Client()

    # Check if bucket exists, create if not
    try:
        bucket = storage_client.get_bucket(bucket_name)
        logger.info(f"Using existing bucket: {bucket_name}")
    except NotFound:
        logger.info(f"Creating new bucket: {bucket_name}")
        bucket = storage_client.create_bucket(bucket_name, location="US")
        bucket.make_public(recursive=True, future=True)

    blob = bucket.blob('index.html')
    blob.cache_control = 'no-cache, max-age=0'
    blob.upload_from_filename(report_path, content_type='text/html')
    blob.make_public()
    logger.info(f"Uploaded {report_path} to gs://{bucket_name}/index.html")

    bucket.configure_website(main_page_suffix='index.html')
    bucket.patch()

    return f"https://storage.googleapis.com/{bucket_name}/index.html"


def main(argv=None):
    parser = argparse.ArgumentParser(description="Publish the linking report to Google Cloud Storage")
    parser.add_argument('bucket', nargs='?', default=REPORT_BUCKET, help="Target bucket name")
    parser.add_argument('--report', default=os.path.join(REPORT_DIR, REPORT_FILENAME),
                        help="Path to the generated report")
    args = parser.parse_args(argv)

    if not args.bucket:
        logger.error("Bucket name is required (argument or REPORT_BUCKET)")
        return 1

    try:
        url = deploy_report(args.bucket.strip().lower(), args.report)
    except Exception as e:
        logger.error(f"Deployment failed: {e}")
        return 1

    print(f"Report is live at: {url}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
