from typing import Optional

from aws_cdk import aws_ec2 as ec2
from constructs import Construct


class VPC(Construct):
    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            vpc_name: Optional[str] = None,
            max_azs: int = 2,
            nat_gateways: int = 1,
            **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # public subnets hold the load balancer, private ones the compute unit
        self._vpc = ec2.Vpc(
            self,
            "VPC",
            vpc_name=vpc_name,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Isolated",
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                ),
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                ),
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                ),
            ],
            max_azs=max_azs,
            nat_gateways=nat_gateways,
        )

    @property
    def vpc(self) -> ec2.Vpc:
        return self._vpc

    @property
    def compute_subnets(self) -> ec2.SubnetSelection:
        return ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS)
