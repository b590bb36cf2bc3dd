import pytest
from aws_cdk.assertions import Match, Template

from core import conf
from core.build_specs import ecr_repository_uri
from ecs_service.component import EcsServiceStack
from template_helpers import artifact_names, pipeline_stages, single_resource


@pytest.fixture
def ecs_stack(cdk_app):
    return EcsServiceStack(cdk_app, "EcsTest")


@pytest.fixture
def template(ecs_stack):
    return Template.from_stack(ecs_stack)


class TestFargateService:

    def test_vpc_name(self, template):
        template.has_resource_properties("AWS::EC2::VPC", {
            "Tags": Match.array_with([{"Key": "Name", "Value": "ReflexiveVpc"}]),
        })

    def test_cluster_uses_fargate_capacity_providers(self, template):
        template.has_resource_properties("AWS::ECS::ClusterCapacityProviderAssociations", {
            "CapacityProviders": Match.array_with(["FARGATE", "FARGATE_SPOT"]),
        })

    def test_service_is_deployed_by_codedeploy(self, template):
        service = single_resource(template, "AWS::ECS::Service")

        assert service["DeploymentController"] == {"Type": "CODE_DEPLOY"}
        assert service["DesiredCount"] == 1

    def test_task_sizing(self, template):
        task_definition = single_resource(template, "AWS::ECS::TaskDefinition")

        assert task_definition["Cpu"] == "512"
        assert task_definition["Memory"] == "1024"
        container, = task_definition["ContainerDefinitions"]
        assert container["Name"] == conf.RS_ECS_CONTAINER_NAME
        assert container["Image"] == "amazon/amazon-ecs-sample"
        assert container["PortMappings"][0]["ContainerPort"] == 80

    def test_repository_name_matches_build_uri(self, template):
        template.has_resource_properties("AWS::ECR::Repository", {
            "RepositoryName": conf.RS_ECS_ECR_REPOSITORY_NAME,
        })

    def test_load_balancer(self, template):
        template.has_resource_properties("AWS::ElasticLoadBalancingV2::LoadBalancer", {
            "Name": "alb",
            "Scheme": "internet-facing",
        })
        listener = single_resource(template, "AWS::ElasticLoadBalancingV2::Listener")
        assert listener["Port"] == 80


class TestBlueGreen:

    def test_target_groups_are_distinct_with_same_port_and_protocol(self, template, ecs_stack):
        target_groups = template.find_resources("AWS::ElasticLoadBalancingV2::TargetGroup")

        assert len(target_groups) == 2
        assert ecs_stack.blue_target_group is not ecs_stack.green_target_group
        properties = [target_group["Properties"] for target_group in target_groups.values()]
        assert {p["Port"] for p in properties} == {conf.RS_ECS_TARGET_GROUP_PORT}
        assert {p["Protocol"] for p in properties} == {"HTTP"}
        assert {p["TargetType"] for p in properties} == {"ip"}

    def test_listener_defaults_to_blue(self, template, ecs_stack):
        listener = single_resource(template, "AWS::ElasticLoadBalancingV2::Listener")
        blue_id = ecs_stack.get_logical_id(ecs_stack.blue_target_group.node.default_child)

        assert listener["DefaultActions"][0]["TargetGroupArn"] == {"Ref": blue_id}

    def test_deployment_group(self, template, ecs_stack):
        group = single_resource(template, "AWS::CodeDeploy::DeploymentGroup")

        assert group["DeploymentStyle"] == {
            "DeploymentOption": "WITH_TRAFFIC_CONTROL",
            "DeploymentType": "BLUE_GREEN",
        }
        assert group["DeploymentConfigName"] == "CodeDeployDefault.ECSAllAtOnce"
        assert set(group["AutoRollbackConfiguration"]["Events"]) == {
            "DEPLOYMENT_FAILURE",
            "DEPLOYMENT_STOP_ON_REQUEST",
        }
        pair, = group["LoadBalancerInfo"]["TargetGroupPairInfoList"]
        blue, green = pair["TargetGroups"]
        assert blue != green
        assert len(pair["ProdTrafficRoute"]["ListenerArns"]) == 1

    def test_application_platform(self, template):
        template.has_resource_properties("AWS::CodeDeploy::Application", {
            "ApplicationName": f"{conf.RS_ECS_APP_NAME}App",
            "ComputePlatform": "ECS",
        })


class TestContainerPipeline:

    def test_stage_order(self, template):
        assert [stage["Name"] for stage in pipeline_stages(template)] == ["Source", "Build", "Deploy"]

    def test_artifacts(self, template):
        source, build, deploy = [stage["Actions"][0] for stage in pipeline_stages(template)]

        assert artifact_names(build, "InputArtifacts") == artifact_names(source, "OutputArtifacts") == {"source"}
        assert artifact_names(deploy, "InputArtifacts") == artifact_names(build, "OutputArtifacts") == {"build"}

    def test_blue_green_deploy_action(self, template):
        deploy = pipeline_stages(template)[2]["Actions"][0]

        assert deploy["ActionTypeId"]["Provider"] == "CodeDeployToECS"
        assert deploy["Configuration"]["TaskDefinitionTemplateArtifact"] == "build"
        assert deploy["Configuration"]["AppSpecTemplateArtifact"] == "build"
        assert deploy["Configuration"]["Image1ArtifactName"] == "build"

    def test_build_pushes_to_ecr(self, template):
        project = single_resource(template, "AWS::CodeBuild::Project")
        ecr_uri = ecr_repository_uri(conf.AWS_ACCOUNT_ID, conf.AWS_REGION, conf.RS_ECS_ECR_REPOSITORY_NAME)

        assert project["Environment"]["Image"] == "aws/codebuild/standard:5.0"
        assert project["Environment"]["PrivilegedMode"] is True
        assert f"docker push {ecr_uri}" in project["Source"]["BuildSpec"]
        assert "imageDetail.json" in project["Source"]["BuildSpec"]

    def test_pipeline_name(self, template):
        template.has_resource_properties("AWS::CodePipeline::Pipeline", {
            "Name": "ReflexiveRsEcsPipeline",
        })
