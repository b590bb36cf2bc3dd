import os

ENV = os.getenv("ENV")
AWS_ACCOUNT_ID = os.getenv("CDK_DEFAULT_ACCOUNT", "")  # may be overridden on each environment
AWS_REGION = os.getenv("CDK_DEFAULT_REGION", "")  # may be overridden on each environment
PROJECT_NAME = "reflexive"

# Source
GITHUB_OWNER = "ntalbs"
GITHUB_CONNECTION_ARN = ""  # to be defined on each environment

# Fleet defaults
FLEET_INSTANCE_TYPE = "t2.micro"
FLEET_MIN_CAPACITY = 1
FLEET_MAX_CAPACITY = 1
FLEET_DESIRED_CAPACITY = 1
FLEET_LISTENER_PORT = 80
FLEET_TARGET_PORT = 3000
FLEET_HEALTH_CHECK_PATH = "/ping"
FLEET_REQUESTS_PER_MINUTE = 1000
FLEET_KEY_NAME = None  # use an existing key pair instead of creating one
FLEET_BASE_USER_DATA_COMMANDS = [
    "sudo yum -y update",
    "sudo yum install -y https://s3.amazonaws.com/ec2-downloads-windows/SSMAgent/latest/linux_amd64/amazon-ssm-agent.rpm",
]

# ReflexiveJavaEc2Stack
JAVA_EC2_STACK_NAME = "ReflexiveJavaEc2Stack"
JAVA_EC2_APP_NAME = "ReflexiveJava"
JAVA_EC2_ALB_NAME = f"{PROJECT_NAME}-java-alb"
JAVA_EC2_GITHUB_REPOSITORY = "reflexive-java"
JAVA_EC2_GITHUB_BRANCH = "mainline"
JAVA_EC2_RUNTIME = "corretto11"
JAVA_EC2_USER_DATA_COMMANDS = [
    *FLEET_BASE_USER_DATA_COMMANDS,
    "sudo yum install -y java-11-amazon-corretto-headless",
]
JAVA_EC2_SSH_KEY_NAME = f"{PROJECT_NAME}-java-ssh-key-{ENV}"

# ReflexiveRsEc2Stack
RS_EC2_STACK_NAME = "ReflexiveRsEc2Stack"
RS_EC2_APP_NAME = "ReflexiveRs"
RS_EC2_ALB_NAME = f"{PROJECT_NAME}-rs-alb"
RS_EC2_GITHUB_REPOSITORY = "reflexive-rs"
RS_EC2_GITHUB_BRANCH = "main"
RS_EC2_BINARY_NAME = "reflexive-rs"
RS_EC2_USER_DATA_COMMANDS = [
    *FLEET_BASE_USER_DATA_COMMANDS,
]
RS_EC2_SSH_KEY_NAME = f"{PROJECT_NAME}-rs-ssh-key-{ENV}"

# ReflexiveRsEcsStack
RS_ECS_STACK_NAME = "ReflexiveRsEcsStack"
RS_ECS_VPC_NAME = "ReflexiveVpc"
RS_ECS_APP_NAME = "ReflexiveRsEcs"
RS_ECS_GITHUB_REPOSITORY = "reflexive-rs"
RS_ECS_GITHUB_BRANCH = "main"
RS_ECS_ECR_REPOSITORY_NAME = f"{PROJECT_NAME}-rs"
RS_ECS_IMAGE_NAME = "reflexive-rs"
RS_ECS_CONTAINER_NAME = "ReflexiveTaskDef"
RS_ECS_SAMPLE_IMAGE = "amazon/amazon-ecs-sample"
RS_ECS_CPU = 512
RS_ECS_MEMORY_LIMIT_MIB = 1024
RS_ECS_DESIRED_COUNT = 1
RS_ECS_LOAD_BALANCER_NAME = "alb"
RS_ECS_TARGET_GROUP_PORT = 80
