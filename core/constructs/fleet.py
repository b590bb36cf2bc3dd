import logging
from typing import List, Optional

from aws_cdk import (
    aws_autoscaling as autoscaling,
    aws_ec2 as ec2,
    aws_elasticloadbalancingv2 as elbv2,
    aws_iam as iam,
)
from cdk_ec2_key_pair import KeyPair
from constructs import Construct

logger = logging.getLogger(__name__)


class Fleet(Construct):
    """
    Auto Scaling Group of Amazon Linux 2 instances reachable through a public Application Load Balancer.

    The listener forwards ``listener_port`` to ``target_port`` on the instances, and the group scales
    on the number of requests each target receives per minute.
    """

    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            vpc: ec2.IVpc,
            load_balancer_name: str,
            instance_type: str,
            user_data_commands: List[str],
            min_capacity: int,
            max_capacity: int,
            desired_capacity: int,
            listener_port: int,
            target_port: int,
            health_check_path: str,
            requests_per_minute: int,
            key_name: Optional[str] = None,
            key_pair_name: Optional[str] = None,
            **kwargs
    ) -> None:
        super().__init__(scope, construct_id)

        self._instance_role = iam.Role(
            self,
            "InstanceRole",
            assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"),
        )
        # add permissions for SSM Agent
        self._instance_role.add_managed_policy(
            iam.ManagedPolicy.from_aws_managed_policy_name("AmazonSSMManagedInstanceCore")
        )

        user_data = ec2.UserData.for_linux()
        user_data.add_commands(*user_data_commands)

        self._key_pair = None
        if not key_name:
            self._key_pair = KeyPair(
                self,
                "InstanceKeyPair",
                name=key_pair_name or f"{construct_id}-key-pair",
                resource_prefix=f"{construct_id}",
            )
            key_name = self._key_pair.key_pair_name

        self._auto_scaling_group = autoscaling.AutoScalingGroup(
            self,
            "Asg",
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS),
            instance_type=ec2.InstanceType(instance_type),
            machine_image=ec2.MachineImage.latest_amazon_linux2(),
            min_capacity=min_capacity,
            max_capacity=max_capacity,
            desired_capacity=desired_capacity,
            role=self._instance_role,
            user_data=user_data,
            key_name=key_name,
        )

        self._load_balancer = elbv2.ApplicationLoadBalancer(
            self,
            "Alb",
            load_balancer_name=load_balancer_name,
            vpc=vpc,
            internet_facing=True,
        )
        # open to the world
        self._listener = self._load_balancer.add_listener(
            "Listener",
            port=listener_port,
            open=True,
        )
        self._target_group = self._listener.add_targets(
            "Target",
            port=target_port,
            protocol=elbv2.ApplicationProtocol.HTTP,
            targets=[self._auto_scaling_group],
            health_check=elbv2.HealthCheck(
                path=health_check_path,
            ),
        )

        # needs the target group registered above
        self._auto_scaling_group.scale_on_request_count(
            "AModestLoad",
            target_requests_per_minute=requests_per_minute,
        )
        logger.debug(
            f"fleet {construct_id}: {instance_type} x{min_capacity}..{max_capacity}, "
            f":{listener_port} -> :{target_port}{health_check_path}"
        )

    @property
    def instance_role(self) -> iam.Role:
        return self._instance_role

    @property
    def key_pair(self) -> Optional[KeyPair]:
        return self._key_pair

    @property
    def auto_scaling_group(self) -> autoscaling.AutoScalingGroup:
        return self._auto_scaling_group

    @property
    def load_balancer(self) -> elbv2.ApplicationLoadBalancer:
        return self._load_balancer

    @property
    def listener(self) -> elbv2.ApplicationListener:
        return self._listener

    @property
    def target_group(self) -> elbv2.ApplicationTargetGroup:
        return self._target_group
