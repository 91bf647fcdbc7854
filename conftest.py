"""Root pytest configuration.

Fake AWS credentials are set at module level so that boto3 resources created
in tests never resolve a real local profile. AWS_CONFIG_FILE is pointed at
/dev/null to keep botocore from discovering SSO or named profiles.
"""

import os

os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_CONFIG_FILE"] = "/dev/null"
