import logging

import aws_cdk as cdk

from core import conf
from workload import Workload

logging.basicConfig(level=logging.INFO)

app = cdk.App()
aws_env = cdk.Environment(
    account=conf.AWS_ACCOUNT_ID or None,
    region=conf.AWS_REGION or None,
)

# every variant is its own stack: cdk deploy <stack name>
Workload(
    scope=app,
    construct_id=f"{conf.PROJECT_NAME}-{conf.ENV}",
    aws_env=aws_env,
)

app.synth()
