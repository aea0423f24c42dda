"""Built-in AWS event source processors."""

from lambda_event_router.adapters.aws import http_proxy, object_storage, pubsub, queue
from lambda_event_router.adapters.aws.http_proxy import ProxyIntegrationConfig, ProxyRoute
from lambda_event_router.adapters.aws.object_storage import ObjectStorageConfig, ObjectStorageRoute
from lambda_event_router.adapters.aws.pubsub import PubSubConfig, PubSubRoute
from lambda_event_router.adapters.aws.queue import QueueConfig, QueueRoute
from lambda_event_router.core.registry import ProcessorRegistration


def builtin_registrations() -> list[ProcessorRegistration]:
    return [
        ProcessorRegistration(
            name="http_proxy",
            processor=http_proxy,
            description="API Gateway proxy integration requests.",
        ),
        ProcessorRegistration(
            name="pubsub",
            processor=pubsub,
            description="SNS notifications.",
        ),
        ProcessorRegistration(
            name="queue",
            processor=queue,
            description="SQS message batches.",
        ),
        ProcessorRegistration(
            name="object_storage",
            processor=object_storage,
            description="S3 object notifications.",
        ),
    ]


__all__ = [
    "builtin_registrations",
    "ProxyIntegrationConfig",
    "ProxyRoute",
    "PubSubConfig",
    "PubSubRoute",
    "QueueConfig",
    "QueueRoute",
    "ObjectStorageConfig",
    "ObjectStorageRoute",
]
