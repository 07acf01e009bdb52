"""Wire root tag names that cannot be derived from shape names.

A response body is deserialized starting at a root tag. The tag is derived
mechanically from the output shape name (see :func:`derive_root_tag`), and
the tables below correct the services where that derivation is wrong. They
are data: extend them (or pass extra overrides through configuration)
rather than adding conditionals to the generators.
"""

import dataclasses
from collections.abc import Mapping

__all__ = [
    'LIST_INDEX_BASE',
    'RootTagTable',
    'derive_root_tag',
    'QUERY_ROOT_TAGS',
    'REST_XML_ROOT_TAGS',
]

# First index used for list and map entries in query-protocol keys.
LIST_INDEX_BASE = 1

_RESULT_SUFFIX = 'Result'
_RESPONSE_SUFFIX = 'Response'


def derive_root_tag(shape_name: str) -> str:
    """``DescribeVolumesResult`` -> ``DescribeVolumesResponse``; other names unchanged."""
    if shape_name.endswith(_RESULT_SUFFIX):
        return shape_name[: -len(_RESULT_SUFFIX)] + _RESPONSE_SUFFIX
    return shape_name


@dataclasses.dataclass(frozen=True)
class RootTagTable:
    """Root tag exceptions for one protocol.

    Attributes:
        overrides: Derived tag name -> literal wire tag.
        operation_overrides: ``(derived tag name, operation name)`` -> literal
            wire tag, for output shapes shared by operations whose responses
            use different root tags. Checked before ``overrides``.
    """

    overrides: Mapping[str, str] = dataclasses.field(default_factory=dict)
    operation_overrides: Mapping[tuple[str, str], str] = dataclasses.field(
        default_factory=dict
    )

    def resolve(self, output_shape_name: str, operation_name: str) -> str:
        derived = derive_root_tag(output_shape_name)
        by_operation = self.operation_overrides.get((derived, operation_name))
        if by_operation is not None:
            return by_operation
        return self.overrides.get(derived, derived)

    def extended(self, overrides: Mapping[str, str]) -> 'RootTagTable':
        """Return a copy with additional ``overrides`` taking precedence."""
        return RootTagTable(
            overrides={**self.overrides, **overrides},
            operation_overrides=dict(self.operation_overrides),
        )


QUERY_ROOT_TAGS = RootTagTable(
    overrides={
        # "Create<output shape>Response" format
        'Snapshot': 'CreateSnapshotResponse',
        'Volume': 'CreateVolumeResponse',
        'KeyPair': 'CreateKeyPairResponse',
        'InstanceAttribute': 'DescribeInstanceAttributeResponse',
        'Reservation': 'RunInstancesResponse',
    },
    operation_overrides={
        ('VolumeAttachment', 'DetachVolume'): 'DetachVolumeResponse',
        ('VolumeAttachment', 'AttachVolume'): 'AttachVolumeResponse',
    },
)

REST_XML_ROOT_TAGS = RootTagTable(
    overrides={
        'ListBucketsOutput': 'ListAllMyBucketsResult',
        'GetBucketTaggingOutput': 'Tagging',
    },
)
