import re

import pytest

from deployment_manager.template import build_deployment, derive_name


@pytest.mark.parametrize("image, expected", [
    ("nginx:1.12", "nginx112"),
    ("gcr.io/google-samples/hello-app:2.0", "gcriogooglesampleshelloapp20"),
    ("Redis", "Redis"),
    ("", ""),
])
def test_derive_name(image, expected):
    assert derive_name(image) == expected


@pytest.mark.parametrize("image", ["nginx:1.12", "a_b-c.d/e@sha256:00ff", "ünïcode:1"])
def test_derive_name_is_stable_and_alphanumeric(image):
    name = derive_name(image)
    assert name == derive_name(image)
    assert re.fullmatch(r"[a-zA-Z0-9]*", name)


def test_distinct_images_can_collide():
    assert derive_name("nginx:1.12") == derive_name("nginx1.12")


def test_build_deployment_defaults():
    d = build_deployment("nginx:1.12", "demo")

    assert d.metadata.name == "nginx112"
    assert d.metadata.namespace == "demo"
    assert d.spec.replicas == 2
    container = d.spec.template.spec.containers[0]
    assert len(d.spec.template.spec.containers) == 1
    assert container.name == "web"
    assert container.image == "nginx:1.12"
    port = container.ports[0]
    assert (port.name, port.protocol, port.container_port) == ("http", "TCP", 80)


def test_selector_matches_pod_labels():
    d = build_deployment("busybox:latest", "demo")
    assert d.spec.selector.match_labels == d.spec.template.metadata.labels == {"app": "busyboxlatest"}


def test_build_deployment_overrides():
    d = build_deployment("app:1", "ns", replicas=0, container_name="main", port_name="grpc", container_port=9000)
    assert d.spec.replicas == 0
    assert d.spec.template.spec.containers[0].name == "main"
    assert d.spec.template.spec.containers[0].ports[0].container_port == 9000


def test_empty_image_is_accepted():
    d = build_deployment("", "demo")
    assert d.metadata.name == ""
    assert d.spec.selector.match_labels == {"app": ""}
