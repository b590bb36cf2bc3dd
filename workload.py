import logging

from aws_cdk import Environment
from constructs import Construct

from core import conf
from core.build_specs import cargo_build_spec, gradle_build_spec
from ec2_service.component import Ec2ApplicationProps, Ec2ServiceStack
from ecs_service.component import EcsServiceStack

logger = logging.getLogger(__name__)


def java_application_props() -> Ec2ApplicationProps:
    return Ec2ApplicationProps(
        application_name=conf.JAVA_EC2_APP_NAME,
        repository=conf.JAVA_EC2_GITHUB_REPOSITORY,
        branch=conf.JAVA_EC2_GITHUB_BRANCH,
        build_spec=gradle_build_spec(conf.JAVA_EC2_RUNTIME),
        load_balancer_name=conf.JAVA_EC2_ALB_NAME,
        user_data_commands=conf.JAVA_EC2_USER_DATA_COMMANDS,
        key_pair_name=conf.JAVA_EC2_SSH_KEY_NAME,
    )


def rs_application_props() -> Ec2ApplicationProps:
    return Ec2ApplicationProps(
        application_name=conf.RS_EC2_APP_NAME,
        repository=conf.RS_EC2_GITHUB_REPOSITORY,
        branch=conf.RS_EC2_GITHUB_BRANCH,
        build_spec=cargo_build_spec(conf.RS_EC2_BINARY_NAME),
        load_balancer_name=conf.RS_EC2_ALB_NAME,
        user_data_commands=conf.RS_EC2_USER_DATA_COMMANDS,
        key_pair_name=conf.RS_EC2_SSH_KEY_NAME,
    )


class Workload(Construct):
    """
    The reflexive applications, one independently deployable stack each.

    Stacks are created on ``scope`` so their names do not depend on this construct.
    """

    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            aws_env: Environment,
            **kwargs
    ):
        super().__init__(scope, construct_id)

        self._java_ec2 = Ec2ServiceStack(
            scope,
            construct_id=conf.JAVA_EC2_STACK_NAME,
            stack_name=conf.JAVA_EC2_STACK_NAME,
            props=java_application_props(),
            env=aws_env,
        )

        self._rs_ec2 = Ec2ServiceStack(
            scope,
            construct_id=conf.RS_EC2_STACK_NAME,
            stack_name=conf.RS_EC2_STACK_NAME,
            props=rs_application_props(),
            env=aws_env,
        )

        self._rs_ecs = EcsServiceStack(
            scope,
            construct_id=conf.RS_ECS_STACK_NAME,
            stack_name=conf.RS_ECS_STACK_NAME,
            env=aws_env,
        )
        logger.info(
            f"workload {construct_id}: "
            f"{', '.join(s.stack_name for s in (self._java_ec2, self._rs_ec2, self._rs_ecs))}"
        )

    @property
    def java_ec2(self) -> Ec2ServiceStack:
        return self._java_ec2

    @property
    def rs_ec2(self) -> Ec2ServiceStack:
        return self._rs_ec2

    @property
    def rs_ecs(self) -> EcsServiceStack:
        return self._rs_ecs
