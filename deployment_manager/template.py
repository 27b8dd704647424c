"""
Builds the deployment object submitted on create.
"""
import re

from kubernetes import client

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")


def derive_name(image: str) -> str:
    """``nginx:1.12`` -> ``nginx112``. Distinct images may collide."""
    return _NON_ALNUM.sub("", image)


def build_deployment(
    image: str,
    namespace: str,
    replicas: int = 2,
    container_name: str = "web",
    port_name: str = "http",
    container_port: int = 80,
) -> client.V1Deployment:
    name = derive_name(image)
    labels = {"app": name}
    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(name=name, namespace=namespace),
        spec=client.V1DeploymentSpec(
            replicas=replicas,
            selector=client.V1LabelSelector(match_labels=labels),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=labels),
                spec=client.V1PodSpec(
                    containers=[
                        client.V1Container(
                            name=container_name,
                            image=image,
                            ports=[
                                client.V1ContainerPort(
                                    name=port_name, protocol="TCP", container_port=container_port
                                )
                            ],
                        )
                    ]
                ),
            ),
        ),
    )
