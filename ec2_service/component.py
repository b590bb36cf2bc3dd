import logging
from dataclasses import dataclass, field
from typing import List, Optional

from aws_cdk import (
    aws_codebuild as codebuild,
    aws_codedeploy as codedeploy,
    CfnOutput, Stack
)
from constructs import Construct

from core import conf
from core.constructs.delivery_pipeline import DeliveryPipeline
from core.constructs.fleet import Fleet
from core.constructs.vpc import VPC

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ec2ApplicationProps:
    """
    Application delivered in place onto an EC2 fleet.

    Attributes
    ----------
    application_name : str
        Prefix for the pipeline, CodeDeploy application and deployment group
    repository : str
        GitHub repository, under ``conf.GITHUB_OWNER``
    branch : str
        Branch that triggers the pipeline
    build_spec : codebuild.BuildSpec
        CodeBuild build spec, its artifacts must include appspec.yml
    load_balancer_name : str
        Name of the public load balancer
    user_data_commands : List[str]
        Bootstrap commands run on each instance
    key_pair_name : Optional[str]
        Name of the key pair created when ``key_name`` is not given
    key_name : Optional[str]
        Existing EC2 key pair to use instead of creating one
    """

    application_name: str
    repository: str
    branch: str
    build_spec: codebuild.BuildSpec
    load_balancer_name: str
    user_data_commands: List[str] = field(default_factory=lambda: list(conf.FLEET_BASE_USER_DATA_COMMANDS))
    build_image: codebuild.IBuildImage = codebuild.LinuxBuildImage.AMAZON_LINUX_2_4
    instance_type: str = conf.FLEET_INSTANCE_TYPE
    min_capacity: int = conf.FLEET_MIN_CAPACITY
    max_capacity: int = conf.FLEET_MAX_CAPACITY
    desired_capacity: int = conf.FLEET_DESIRED_CAPACITY
    listener_port: int = conf.FLEET_LISTENER_PORT
    target_port: int = conf.FLEET_TARGET_PORT
    health_check_path: str = conf.FLEET_HEALTH_CHECK_PATH
    requests_per_minute: int = conf.FLEET_REQUESTS_PER_MINUTE
    key_pair_name: Optional[str] = None
    key_name: Optional[str] = conf.FLEET_KEY_NAME

    def __post_init__(self):
        if not 0 <= self.min_capacity <= self.desired_capacity <= self.max_capacity:
            raise ValueError(
                f"{self.application_name}: capacity must satisfy min <= desired <= max, got "
                f"min={self.min_capacity}, desired={self.desired_capacity}, max={self.max_capacity}"
            )


class Ec2ServiceStack(Stack):

    def __init__(self, scope: Construct, construct_id: str, props: Ec2ApplicationProps, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        vpc = VPC(self, "Vpc")

        self._fleet = Fleet(
            self,
            "Fleet",
            vpc=vpc.vpc,
            load_balancer_name=props.load_balancer_name,
            instance_type=props.instance_type,
            user_data_commands=props.user_data_commands,
            min_capacity=props.min_capacity,
            max_capacity=props.max_capacity,
            desired_capacity=props.desired_capacity,
            listener_port=props.listener_port,
            target_port=props.target_port,
            health_check_path=props.health_check_path,
            requests_per_minute=props.requests_per_minute,
            key_name=props.key_name,
            key_pair_name=props.key_pair_name,
        )

        self._delivery = DeliveryPipeline(
            self,
            f"{props.application_name}Pipeline",
            pipeline_name=f"{props.application_name}Pipeline",
            connection_arn=conf.GITHUB_CONNECTION_ARN,
            owner=conf.GITHUB_OWNER,
        )
        self._delivery.add_source_stage(
            repository=props.repository,
            branch=props.branch,
        )
        self._delivery.add_build_stage(
            build_spec=props.build_spec,
            build_image=props.build_image,
        )

        application = codedeploy.ServerApplication(
            self,
            f"{props.application_name}Application",
            application_name=f"{props.application_name}App",
        )
        self._deployment_group = codedeploy.ServerDeploymentGroup(
            self,
            f"{props.application_name}DeploymentGroup",
            application=application,
            deployment_group_name=f"{props.application_name}DeploymentGroup",
            auto_scaling_groups=[self._fleet.auto_scaling_group],
            install_agent=True,
            ignore_poll_alarms_failure=False,
            auto_rollback=codedeploy.AutoRollbackConfig(
                failed_deployment=True,
                stopped_deployment=True,
                deployment_in_alarm=False,
            ),
        )
        self._delivery.add_deploy_stage(
            self._delivery.server_deploy_action(self._deployment_group)
        )

        CfnOutput(
            self,
            "LoadBalancerUrl",
            description="Application Load Balancer URL",
            value=f"http://{self._fleet.load_balancer.load_balancer_dns_name}",
        )
        logger.info(f"{construct_id}: {props.repository}@{props.branch} deployed in place on {props.instance_type}")

    @property
    def fleet(self) -> Fleet:
        return self._fleet

    @property
    def delivery(self) -> DeliveryPipeline:
        return self._delivery

    @property
    def deployment_group(self) -> codedeploy.ServerDeploymentGroup:
        return self._deployment_group
