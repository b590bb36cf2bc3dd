import logging

from aws_cdk import (
    aws_codebuild as codebuild,
    aws_codedeploy as codedeploy,
    aws_ecr as ecr,
    aws_ecs as ecs,
    aws_ecs_patterns as ecs_patterns,
    aws_elasticloadbalancingv2 as elbv2,
    CfnOutput, RemovalPolicy, Stack
)
from constructs import Construct

from core import conf
from core.build_specs import docker_image_build_spec, ecr_repository_uri
from core.constructs.delivery_pipeline import DeliveryPipeline
from core.constructs.vpc import VPC

logger = logging.getLogger(__name__)


class EcsServiceStack(Stack):

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        vpc = VPC(self, "ReflexiveRsVpc", vpc_name=conf.RS_ECS_VPC_NAME)

        cluster = ecs.Cluster(
            self,
            "ReflexiveRsCluster",
            vpc=vpc.vpc,
            enable_fargate_capacity_providers=True,
        )

        # named, so the uri built from account and region points to it
        self._repository = ecr.Repository(
            self,
            "ReflexiveRsRepo",
            repository_name=conf.RS_ECS_ECR_REPOSITORY_NAME,
            removal_policy=RemovalPolicy.RETAIN,
        )

        self._service = ecs_patterns.ApplicationLoadBalancedFargateService(
            self,
            "ReflexiveRsEcsService",
            cluster=cluster,
            memory_limit_mib=conf.RS_ECS_MEMORY_LIMIT_MIB,
            desired_count=conf.RS_ECS_DESIRED_COUNT,
            cpu=conf.RS_ECS_CPU,
            task_image_options=ecs_patterns.ApplicationLoadBalancedTaskImageOptions(
                image=ecs.ContainerImage.from_registry(conf.RS_ECS_SAMPLE_IMAGE),
                container_name=conf.RS_ECS_CONTAINER_NAME,
                container_port=conf.RS_ECS_TARGET_GROUP_PORT,
            ),
            task_subnets=vpc.compute_subnets,
            load_balancer_name=conf.RS_ECS_LOAD_BALANCER_NAME,
            listener_port=conf.RS_ECS_TARGET_GROUP_PORT,
            deployment_controller=ecs.DeploymentController(
                type=ecs.DeploymentControllerType.CODE_DEPLOY,
            ),
        )

        # the pattern's target group is blue: the service starts registered on it
        self._blue_target_group = self._service.target_group
        self._green_target_group = elbv2.ApplicationTargetGroup(
            self,
            "GreenTargetGroup",
            port=conf.RS_ECS_TARGET_GROUP_PORT,
            protocol=elbv2.ApplicationProtocol.HTTP,
            target_type=elbv2.TargetType.IP,
            vpc=vpc.vpc,
        )

        self._delivery = self._create_pipeline()

        CfnOutput(
            self,
            "RepositoryUri",
            description="ECR repository the pipeline pushes to",
            value=self._repository.repository_uri,
        )

    def _create_pipeline(self) -> DeliveryPipeline:
        delivery = DeliveryPipeline(
            self,
            "ReflexiveRsEcsPipeline",
            pipeline_name="ReflexiveRsEcsPipeline",
            connection_arn=conf.GITHUB_CONNECTION_ARN,
            owner=conf.GITHUB_OWNER,
        )

        #
        # Source stage
        #
        delivery.add_source_stage(
            repository=conf.RS_ECS_GITHUB_REPOSITORY,
            branch=conf.RS_ECS_GITHUB_BRANCH,
        )

        #
        # Build stage
        #
        ecr_uri = ecr_repository_uri(conf.AWS_ACCOUNT_ID, conf.AWS_REGION, conf.RS_ECS_ECR_REPOSITORY_NAME)
        delivery.add_build_stage(
            build_spec=docker_image_build_spec(
                ecr_uri=ecr_uri,
                region=conf.AWS_REGION,
                image_name=conf.RS_ECS_IMAGE_NAME,
                container_name=conf.RS_ECS_CONTAINER_NAME,
            ),
            build_image=codebuild.LinuxBuildImage.STANDARD_5_0,
            # docker daemon
            privileged=True,
        )
        self._repository.grant_pull_push(delivery.project)

        #
        # Deploy stage
        #
        application = codedeploy.EcsApplication(
            self,
            "ReflexiveApplication",
            application_name=f"{conf.RS_ECS_APP_NAME}App",
        )
        self._deployment_group = codedeploy.EcsDeploymentGroup(
            self,
            "ReflexiveDeploymentGroup",
            application=application,
            service=self._service.service,
            blue_green_deployment_config=codedeploy.EcsBlueGreenDeploymentConfig(
                blue_target_group=self._blue_target_group,
                green_target_group=self._green_target_group,
                listener=self._service.listener,
            ),
            deployment_config=codedeploy.EcsDeploymentConfig.ALL_AT_ONCE,
            auto_rollback=codedeploy.AutoRollbackConfig(
                failed_deployment=True,
                stopped_deployment=True,
            ),
        )
        delivery.add_deploy_stage(delivery.ecs_deploy_action(self._deployment_group))

        logger.info(f"{self.node.id}: {conf.RS_ECS_GITHUB_REPOSITORY}@{conf.RS_ECS_GITHUB_BRANCH} -> {ecr_uri}, blue/green")
        return delivery

    @property
    def service(self) -> ecs_patterns.ApplicationLoadBalancedFargateService:
        return self._service

    @property
    def repository(self) -> ecr.Repository:
        return self._repository

    @property
    def blue_target_group(self) -> elbv2.ApplicationTargetGroup:
        return self._blue_target_group

    @property
    def green_target_group(self) -> elbv2.ApplicationTargetGroup:
        return self._green_target_group

    @property
    def deployment_group(self) -> codedeploy.EcsDeploymentGroup:
        return self._deployment_group

    @property
    def delivery(self) -> DeliveryPipeline:
        return self._delivery
