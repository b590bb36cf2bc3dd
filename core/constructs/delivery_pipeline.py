import logging
from typing import List, Mapping, Optional

from aws_cdk import (
    aws_codebuild as codebuild,
    aws_codedeploy as codedeploy,
    aws_codepipeline as codepipeline,
    aws_codepipeline_actions as codepipeline_actions,
)
from constructs import Construct
from varname import nameof

from core import conf

logger = logging.getLogger(__name__)

SOURCE_STAGE_NAME = "Source"
BUILD_STAGE_NAME = "Build"
DEPLOY_STAGE_NAME = "Deploy"
STAGE_ORDER = [SOURCE_STAGE_NAME, BUILD_STAGE_NAME, DEPLOY_STAGE_NAME]

SOURCE_ARTIFACT_NAME = "source"
BUILD_ARTIFACT_NAME = "build"


class PipelineStageOrderError(ValueError):
    pass


class DeliveryPipeline(Construct):
    """
    Linear Source -> Build -> Deploy pipeline.

    Stages are added one at a time and must follow that order, each stage consuming the artifact
    produced by the previous one.
    """

    _pipeline: codepipeline.Pipeline
    _stage_names: List[str]
    _source_output: Optional[codepipeline.Artifact]
    _build_output: Optional[codepipeline.Artifact]
    _project: Optional[codebuild.Project]

    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            pipeline_name: str,
            connection_arn: str,
            owner: str,
    ):
        super().__init__(scope, construct_id)
        self._connection_arn = connection_arn
        self._owner = owner
        self._stage_names = []
        self._source_output = None
        self._build_output = None
        self._project = None

        self._pipeline = codepipeline.Pipeline(
            scope=self,
            id="Pipeline",
            pipeline_name=pipeline_name,
        )

    def _check_next_stage(self, stage_name: str):
        expected = STAGE_ORDER[len(self._stage_names)] if len(self._stage_names) < len(STAGE_ORDER) else None
        if stage_name != expected:
            raise PipelineStageOrderError(
                f"cannot add stage {stage_name} after {self._stage_names or 'nothing'}, "
                f"stages go {' -> '.join(STAGE_ORDER)}"
            )

    def _add_stage(self, stage_name: str, action: codepipeline.IAction) -> codepipeline.IStage:
        self._check_next_stage(stage_name)
        stage = self._pipeline.add_stage(
            stage_name=stage_name,
            actions=[action],
        )
        self._stage_names.append(stage_name)
        logger.debug(f"{self.node.id}: added stage {stage_name}")
        return stage

    def add_source_stage(self, repository: str, branch: str) -> codepipeline.Artifact:
        # checked before the artifact exists, _add_stage checks again
        self._check_next_stage(SOURCE_STAGE_NAME)
        source_output = codepipeline.Artifact(SOURCE_ARTIFACT_NAME)
        self._add_stage(
            SOURCE_STAGE_NAME,
            codepipeline_actions.CodeStarConnectionsSourceAction(
                action_name="Github_Source",
                connection_arn=self._connection_arn,
                owner=self._owner,
                repo=repository,
                branch=branch,
                output=source_output,
                trigger_on_push=True,
            ),
        )
        self._source_output = source_output
        return source_output

    def add_build_stage(
            self,
            build_spec: codebuild.BuildSpec,
            build_image: codebuild.IBuildImage,
            privileged: bool = False,
            environment_variables: Optional[Mapping[str, str]] = None,
    ) -> codepipeline.Artifact:
        # checked before the project is created, _add_stage checks again
        self._check_next_stage(BUILD_STAGE_NAME)
        variables = {
            nameof(conf.ENV): conf.ENV,
            **(environment_variables or {}),
        }
        self._project = codebuild.Project(
            self,
            "Project",
            environment=codebuild.BuildEnvironment(
                build_image=build_image,
                privileged=privileged,
            ),
            environment_variables={
                name: codebuild.BuildEnvironmentVariable(value=value)
                for name, value in variables.items()
            },
            build_spec=build_spec,
        )
        build_output = codepipeline.Artifact(BUILD_ARTIFACT_NAME)
        self._add_stage(
            BUILD_STAGE_NAME,
            codepipeline_actions.CodeBuildAction(
                action_name="BuildAction",
                input=self._source_output,
                outputs=[build_output],
                project=self._project,
            ),
        )
        self._build_output = build_output
        return build_output

    def add_deploy_stage(self, action: codepipeline.IAction) -> codepipeline.IStage:
        return self._add_stage(DEPLOY_STAGE_NAME, action)

    def _require_build_output(self) -> codepipeline.Artifact:
        if self._build_output is None:
            raise PipelineStageOrderError(f"{DEPLOY_STAGE_NAME} needs the {BUILD_STAGE_NAME} stage output")
        return self._build_output

    def server_deploy_action(
            self,
            deployment_group: codedeploy.IServerDeploymentGroup,
    ) -> codepipeline_actions.CodeDeployServerDeployAction:
        # in-place: the build bundle lands on every instance of the group
        return codepipeline_actions.CodeDeployServerDeployAction(
            action_name="DeployAction",
            deployment_group=deployment_group,
            input=self._require_build_output(),
        )

    def ecs_deploy_action(
            self,
            deployment_group: codedeploy.IEcsDeploymentGroup,
    ) -> codepipeline_actions.CodeDeployEcsDeployAction:
        # https://docs.aws.amazon.com/AmazonECS/latest/userguide/deployment-type-bluegreen.html
        build_output = self._require_build_output()
        return codepipeline_actions.CodeDeployEcsDeployAction(
            action_name="DeployAction",
            deployment_group=deployment_group,
            container_image_inputs=[
                codepipeline_actions.CodeDeployEcsContainerImageInput(input=build_output),
            ],
            app_spec_template_input=build_output,
            task_definition_template_input=build_output,
        )

    @property
    def pipeline(self) -> codepipeline.Pipeline:
        return self._pipeline

    @property
    def project(self) -> Optional[codebuild.Project]:
        return self._project

    @property
    def source_output(self) -> Optional[codepipeline.Artifact]:
        return self._source_output

    @property
    def build_output(self) -> Optional[codepipeline.Artifact]:
        return self._build_output

    @property
    def stage_names(self) -> List[str]:
        return list(self._stage_names)
