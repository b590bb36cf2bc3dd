from typing import List

from aws_cdk import aws_codebuild as codebuild

BUILD_SPEC_VERSION = "0.2"


def ecr_repository_uri(account: str, region: str, repository_name: str) -> str:
    return f"{account}.dkr.ecr.{region}.amazonaws.com/{repository_name}"


def gradle_build_spec(java_runtime: str) -> codebuild.BuildSpec:
    return codebuild.BuildSpec.from_object({
        "version": BUILD_SPEC_VERSION,
        "phases": {
            "install": {
                "runtime-versions": {
                    "java": java_runtime,
                }
            },
            "build": {
                "commands": [
                    "./gradlew build",
                ]
            },
        },
        "artifacts": {
            "files": [
                "appspec.yml",
                "build/distributions/*",
                "scripts/*",
            ],
        },
    })


def cargo_build_spec(binary_name: str) -> codebuild.BuildSpec:
    # no rust runtime-version on the codebuild images, rustup installs the stable toolchain
    return codebuild.BuildSpec.from_object({
        "version": BUILD_SPEC_VERSION,
        "phases": {
            "install": {
                "commands": [
                    "curl --proto '=https' --tlsv1.2 -sSf https://sh.rustup.rs | sh -s -- -y --profile minimal",
                ]
            },
            "build": {
                "commands": [
                    '. "$HOME/.cargo/env"',
                    "cargo build --release",
                ]
            },
        },
        "artifacts": {
            "files": [
                "appspec.yml",
                f"target/release/{binary_name}",
                "scripts/*",
            ],
        },
    })


def docker_image_build_spec(
        ecr_uri: str,
        region: str,
        image_name: str,
        container_name: str,
) -> codebuild.BuildSpec:
    """
    Build spec that builds a docker image, pushes it to ECR and leaves the files CodeDeploy needs
    for an ECS blue/green deployment.

    Parameters
    ----------
    ecr_uri : str
        Repository URI, as returned by ``ecr_repository_uri``
    region : str
        AWS region of the registry
    image_name : str
        Local tag used while building
    container_name : str
        Container name on the task definition, referenced by imagedefinitions.json

    Returns
    -------
    codebuild.BuildSpec
    """
    return codebuild.BuildSpec.from_object({
        "version": BUILD_SPEC_VERSION,
        "phases": {
            "pre_build": {
                "commands": [
                    f"aws ecr get-login-password --region {region} | docker login --username AWS --password-stdin {ecr_uri}",
                ]
            },
            "build": {
                "commands": [
                    f"docker build -t {image_name} .",
                    f"docker tag {image_name} {ecr_uri}",
                ]
            },
            "post_build": {
                "commands": [
                    f"docker push {ecr_uri}",
                    f"printf '[{{\"name\": \"{container_name}\", \"imageUri\": \"%s\"}}]' {ecr_uri} > imagedefinitions.json",
                    f"printf '{{\"ImageURI\": \"%s\"}}' {ecr_uri} > imageDetail.json",
                ]
            },
        },
        "artifacts": {
            "files": image_artifact_files(),
        },
    })


def image_artifact_files() -> List[str]:
    # appspec.yaml and taskdef.json are the templates kept in the application repository
    return [
        "imagedefinitions.json",
        "imageDetail.json",
        "appspec.yaml",
        "taskdef.json",
    ]
