"""Test fixtures for shapegen tests.

This module provides sample service models, trimmed down from the botocore
descriptions of S3 (rest-xml) and EC2 (ec2 query protocol), plus a few small
models for edge cases.
"""

import copy
import importlib.util
import itertools
import sys
from pathlib import Path
from types import ModuleType

SAMPLE_DATA_DIR = Path(__file__).parent.parent / 'sample-data'

_module_ids = itertools.count()


def _string(**extra):
    return {'type': 'string', **extra}


S3_SERVICE = {
    'metadata': {
        'apiVersion': '2006-03-01',
        'endpointPrefix': 's3',
        'protocol': 'rest-xml',
        'serviceAbbreviation': 'Amazon S3',
        'serviceFullName': 'Amazon Simple Storage Service',
        'signatureVersion': 's3',
        'xmlNamespace': 'http://s3.amazonaws.com/doc/2006-03-01/',
    },
    'documentation': '<p>Amazon Simple Storage Service is storage for the Internet.</p>',
    'operations': {
        'ListBuckets': {
            'http': {'method': 'GET', 'requestUri': '/'},
            'output': {'shape': 'ListBucketsOutput'},
            'documentation': '<p>Returns a list of all buckets owned by the '
            'authenticated sender of the request.</p>',
        },
        'GetObject': {
            'http': {'method': 'GET', 'requestUri': '/{Bucket}/{Key+}'},
            'input': {'shape': 'GetObjectRequest'},
            'output': {'shape': 'GetObjectOutput'},
            'errors': [{'shape': 'NoSuchKey'}],
            'documentation': '<p>Retrieves objects from Amazon S3.</p>',
        },
        'HeadObject': {
            'http': {'method': 'HEAD', 'requestUri': '/{Bucket}/{Key+}'},
            'input': {'shape': 'HeadObjectRequest'},
            'output': {'shape': 'HeadObjectOutput'},
        },
        'PutObject': {
            'http': {'method': 'PUT', 'requestUri': '/{Bucket}/{Key+}'},
            'input': {'shape': 'PutObjectRequest'},
            'output': {'shape': 'PutObjectOutput'},
        },
        'GetBucketTagging': {
            'http': {'method': 'GET', 'requestUri': '/{Bucket}?tagging'},
            'input': {'shape': 'GetBucketTaggingRequest'},
            'output': {'shape': 'GetBucketTaggingOutput'},
        },
        'PutBucketTagging': {
            'http': {'method': 'PUT', 'requestUri': '/{Bucket}?tagging'},
            'input': {'shape': 'PutBucketTaggingRequest'},
        },
    },
    'shapes': {
        'Body': {'type': 'blob'},
        'Bucket': {
            'type': 'structure',
            'members': {
                'Name': {'shape': 'BucketName'},
                'CreationDate': {'shape': 'CreationDate'},
            },
        },
        'BucketName': _string(),
        'Buckets': {
            'type': 'list',
            'member': {'shape': 'Bucket', 'locationName': 'Bucket'},
        },
        'ContentLength': {'type': 'long'},
        'ContentMD5': _string(),
        'ContentType': _string(),
        'CreationDate': {'type': 'timestamp'},
        'DeleteMarker': {'type': 'boolean'},
        'DisplayName': _string(),
        'ETag': _string(),
        'Expiration': _string(),
        'GetBucketTaggingOutput': {
            'type': 'structure',
            'required': ['TagSet'],
            'members': {'TagSet': {'shape': 'TagSet'}},
        },
        'GetBucketTaggingRequest': {
            'type': 'structure',
            'required': ['Bucket'],
            'members': {
                'Bucket': {
                    'shape': 'BucketName',
                    'location': 'uri',
                    'locationName': 'Bucket',
                },
            },
        },
        'GetObjectOutput': {
            'type': 'structure',
            'members': {
                'Body': {'shape': 'Body', 'streaming': True},
                'DeleteMarker': {
                    'shape': 'DeleteMarker',
                    'location': 'header',
                    'locationName': 'x-amz-delete-marker',
                },
                'ContentLength': {
                    'shape': 'ContentLength',
                    'location': 'header',
                    'locationName': 'Content-Length',
                },
                'ContentType': {
                    'shape': 'ContentType',
                    'location': 'header',
                    'locationName': 'Content-Type',
                },
                'Metadata': {
                    'shape': 'Metadata',
                    'location': 'headers',
                    'locationName': 'x-amz-meta-',
                },
            },
            'payload': 'Body',
        },
        'GetObjectRequest': {
            'type': 'structure',
            'required': ['Bucket', 'Key'],
            'members': {
                'Bucket': {
                    'shape': 'BucketName',
                    'location': 'uri',
                    'locationName': 'Bucket',
                },
                'Key': {'shape': 'ObjectKey', 'location': 'uri', 'locationName': 'Key'},
                'Range': {'shape': 'Range', 'location': 'header', 'locationName': 'Range'},
                'VersionId': {
                    'shape': 'ObjectVersionId',
                    'location': 'querystring',
                    'locationName': 'versionId',
                },
                'PartNumber': {
                    'shape': 'PartNumber',
                    'location': 'querystring',
                    'locationName': 'partNumber',
                },
            },
        },
        'HeadObjectOutput': {
            'type': 'structure',
            'members': {
                'Expiration': {
                    'shape': 'Expiration',
                    'location': 'header',
                    'locationName': 'x-amz-expiration',
                },
                'Restore': {
                    'shape': 'Restore',
                    'location': 'header',
                    'locationName': 'x-amz-restore',
                },
                'ContentLength': {
                    'shape': 'ContentLength',
                    'location': 'header',
                    'locationName': 'Content-Length',
                },
            },
        },
        'HeadObjectRequest': {
            'type': 'structure',
            'required': ['Bucket', 'Key'],
            'members': {
                'Bucket': {
                    'shape': 'BucketName',
                    'location': 'uri',
                    'locationName': 'Bucket',
                },
                'IfMatch': {
                    'shape': 'IfMatch',
                    'location': 'header',
                    'locationName': 'If-Match',
                },
                'Key': {'shape': 'ObjectKey', 'location': 'uri', 'locationName': 'Key'},
            },
        },
        'ID': _string(),
        'IfMatch': _string(),
        'ListBucketsOutput': {
            'type': 'structure',
            'members': {
                'Buckets': {'shape': 'Buckets'},
                'Owner': {'shape': 'Owner'},
            },
        },
        'Metadata': {
            'type': 'map',
            'key': {'shape': 'MetadataKey'},
            'value': {'shape': 'MetadataValue'},
        },
        'MetadataKey': _string(),
        'MetadataValue': _string(),
        'NoSuchKey': {
            'type': 'structure',
            'members': {},
            'documentation': '<p>The specified key does not exist.</p>',
        },
        'ObjectKey': _string(),
        'ObjectVersionId': _string(),
        'Owner': {
            'type': 'structure',
            'members': {
                'DisplayName': {'shape': 'DisplayName'},
                'ID': {'shape': 'ID'},
            },
        },
        'PartNumber': {'type': 'integer'},
        'PutBucketTaggingRequest': {
            'type': 'structure',
            'required': ['Bucket', 'Tagging'],
            'members': {
                'Bucket': {
                    'shape': 'BucketName',
                    'location': 'uri',
                    'locationName': 'Bucket',
                },
                'ContentMD5': {
                    'shape': 'ContentMD5',
                    'location': 'header',
                    'locationName': 'Content-MD5',
                },
                'Tagging': {'shape': 'Tagging', 'locationName': 'Tagging'},
            },
            'payload': 'Tagging',
        },
        'PutObjectOutput': {
            'type': 'structure',
            'members': {
                'ETag': {'shape': 'ETag', 'location': 'header', 'locationName': 'ETag'},
            },
        },
        'PutObjectRequest': {
            'type': 'structure',
            'required': ['Bucket', 'Key'],
            'members': {
                'Body': {'shape': 'Body', 'streaming': True},
                'Bucket': {
                    'shape': 'BucketName',
                    'location': 'uri',
                    'locationName': 'Bucket',
                },
                'ContentType': {
                    'shape': 'ContentType',
                    'location': 'header',
                    'locationName': 'Content-Type',
                },
                'Key': {'shape': 'ObjectKey', 'location': 'uri', 'locationName': 'Key'},
                'Metadata': {
                    'shape': 'Metadata',
                    'location': 'headers',
                    'locationName': 'x-amz-meta-',
                },
            },
            'payload': 'Body',
        },
        'Range': _string(),
        'Restore': _string(),
        'Tag': {
            'type': 'structure',
            'required': ['Key', 'Value'],
            'members': {
                'Key': {'shape': 'ObjectKey'},
                'Value': {'shape': 'Value'},
            },
        },
        'TagSet': {
            'type': 'list',
            'member': {'shape': 'Tag', 'locationName': 'Tag'},
        },
        'Tagging': {
            'type': 'structure',
            'required': ['TagSet'],
            'members': {'TagSet': {'shape': 'TagSet'}},
        },
        'Value': _string(),
    },
}


EC2_SERVICE = {
    'metadata': {
        'apiVersion': '2016-11-15',
        'endpointPrefix': 'ec2',
        'protocol': 'ec2',
        'serviceAbbreviation': 'Amazon EC2',
        'serviceFullName': 'Amazon Elastic Compute Cloud',
        'xmlNamespace': 'http://ec2.amazonaws.com/doc/2016-11-15',
    },
    'operations': {
        'CreateVolume': {
            'http': {'method': 'POST', 'requestUri': '/'},
            'input': {'shape': 'CreateVolumeRequest'},
            'output': {'shape': 'Volume'},
            'documentation': '<p>Creates an EBS volume.</p>',
        },
        'DeleteVolume': {
            'http': {'method': 'POST', 'requestUri': '/'},
            'input': {'shape': 'DeleteVolumeRequest'},
        },
        'DescribeVolumes': {
            'http': {'method': 'POST', 'requestUri': '/'},
            'input': {'shape': 'DescribeVolumesRequest'},
            'output': {'shape': 'DescribeVolumesResult'},
            'documentation': '<p>Describes the specified EBS volumes.</p>',
        },
        'DetachVolume': {
            'http': {'method': 'POST', 'requestUri': '/'},
            'input': {'shape': 'DetachVolumeRequest'},
            'output': {'shape': 'VolumeAttachment'},
        },
    },
    'shapes': {
        'Boolean': {'type': 'boolean'},
        'CreateVolumeRequest': {
            'type': 'structure',
            'required': ['AvailabilityZone'],
            'members': {
                'AvailabilityZone': {'shape': 'String'},
                'Encrypted': {'shape': 'Boolean', 'locationName': 'encrypted'},
                'Size': {'shape': 'Integer'},
                'VolumeType': {'shape': 'VolumeType'},
                'DryRun': {'shape': 'Boolean', 'locationName': 'dryRun'},
            },
        },
        'DateTime': {'type': 'timestamp'},
        'DeleteVolumeRequest': {
            'type': 'structure',
            'required': ['VolumeId'],
            'members': {
                'VolumeId': {'shape': 'String'},
                'DryRun': {'shape': 'Boolean', 'locationName': 'dryRun'},
            },
        },
        'DescribeVolumesRequest': {
            'type': 'structure',
            'members': {
                'Filters': {'shape': 'FilterList', 'locationName': 'Filter'},
                'VolumeIds': {'shape': 'VolumeIdStringList', 'locationName': 'VolumeId'},
                'MaxResults': {'shape': 'Integer', 'locationName': 'maxResults'},
                'NextToken': {'shape': 'String', 'locationName': 'nextToken'},
                'DryRun': {'shape': 'Boolean', 'locationName': 'dryRun'},
            },
        },
        'DescribeVolumesResult': {
            'type': 'structure',
            'members': {
                'Volumes': {'shape': 'VolumeList', 'locationName': 'volumeSet'},
                'NextToken': {'shape': 'String', 'locationName': 'nextToken'},
            },
        },
        'DetachVolumeRequest': {
            'type': 'structure',
            'required': ['VolumeId'],
            'members': {
                'Device': {'shape': 'String'},
                'Force': {'shape': 'Boolean'},
                'InstanceId': {'shape': 'String'},
                'VolumeId': {'shape': 'String'},
                'DryRun': {'shape': 'Boolean', 'locationName': 'dryRun'},
            },
        },
        'Filter': {
            'type': 'structure',
            'members': {
                'Name': {'shape': 'String'},
                'Values': {'shape': 'ValueStringList', 'locationName': 'Value'},
            },
        },
        'FilterList': {
            'type': 'list',
            'member': {'shape': 'Filter', 'locationName': 'Filter'},
        },
        'Integer': {'type': 'integer'},
        'String': _string(),
        'Tag': {
            'type': 'structure',
            'members': {
                'Key': {'shape': 'String', 'locationName': 'key'},
                'Value': {'shape': 'String', 'locationName': 'value'},
            },
        },
        'TagList': {
            'type': 'list',
            'member': {'shape': 'Tag', 'locationName': 'item'},
        },
        'ValueStringList': {
            'type': 'list',
            'member': {'shape': 'String', 'locationName': 'item'},
        },
        'Volume': {
            'type': 'structure',
            'members': {
                'Attachments': {
                    'shape': 'VolumeAttachmentList',
                    'locationName': 'attachmentSet',
                },
                'AvailabilityZone': {'shape': 'String', 'locationName': 'availabilityZone'},
                'CreateTime': {'shape': 'DateTime', 'locationName': 'createTime'},
                'Encrypted': {'shape': 'Boolean', 'locationName': 'encrypted'},
                'Size': {'shape': 'Integer', 'locationName': 'size'},
                'State': {'shape': 'VolumeState', 'locationName': 'status'},
                'VolumeId': {'shape': 'String', 'locationName': 'volumeId'},
                'Tags': {'shape': 'TagList', 'locationName': 'tagSet'},
            },
        },
        'VolumeAttachment': {
            'type': 'structure',
            'members': {
                'AttachTime': {'shape': 'DateTime', 'locationName': 'attachTime'},
                'Device': {'shape': 'String', 'locationName': 'device'},
                'InstanceId': {'shape': 'String', 'locationName': 'instanceId'},
                'State': {'shape': 'VolumeAttachmentState', 'locationName': 'status'},
                'VolumeId': {'shape': 'String', 'locationName': 'volumeId'},
                'DeleteOnTermination': {
                    'shape': 'Boolean',
                    'locationName': 'deleteOnTermination',
                },
            },
        },
        'VolumeAttachmentList': {
            'type': 'list',
            'member': {'shape': 'VolumeAttachment', 'locationName': 'item'},
        },
        'VolumeAttachmentState': _string(),
        'VolumeIdStringList': {
            'type': 'list',
            'member': {'shape': 'String', 'locationName': 'VolumeId'},
        },
        'VolumeList': {
            'type': 'list',
            'member': {'shape': 'Volume', 'locationName': 'item'},
        },
        'VolumeState': _string(),
        'VolumeType': _string(),
    },
}


# Query service exercising every primitive kind, maps and a deprecated member.
PRIMITIVES_SERVICE = {
    'metadata': {
        'apiVersion': '2020-01-01',
        'endpointPrefix': 'widgets',
        'protocol': 'query',
        'serviceFullName': 'Widget Service',
    },
    'operations': {
        'PutWidget': {
            'http': {'method': 'POST', 'requestUri': '/'},
            'input': {'shape': 'Widget'},
            'output': {'shape': 'PutWidgetResult'},
        },
        'Ping': {
            'http': {'method': 'POST', 'requestUri': '/'},
            'output': {'shape': 'PingResult'},
        },
    },
    'shapes': {
        'Attributes': {
            'type': 'map',
            'key': {'shape': 'Text', 'locationName': 'Name'},
            'value': {'shape': 'Text', 'locationName': 'Value'},
        },
        'Blob': {'type': 'blob'},
        'Flag': {'type': 'boolean'},
        'Count': {'type': 'integer'},
        'Labels': {'type': 'map', 'key': {'shape': 'Text'}, 'value': {'shape': 'Text'}},
        'Big': {'type': 'long'},
        'PingResult': {'type': 'structure', 'members': {}},
        'Ratio': {'type': 'double'},
        'Scale': {'type': 'float'},
        'Text': _string(),
        'Stamp': {'type': 'timestamp'},
        'Widget': {
            'type': 'structure',
            'required': ['Name', 'Count'],
            'members': {
                'Name': {'shape': 'Text'},
                'Count': {'shape': 'Count'},
                'Big': {'shape': 'Big'},
                'Ratio': {'shape': 'Ratio'},
                'Scale': {'shape': 'Scale'},
                'Enabled': {'shape': 'Flag'},
                'Data': {'shape': 'Blob'},
                'Created': {'shape': 'Stamp'},
                'Attributes': {'shape': 'Attributes', 'locationName': 'Attribute'},
                'Labels': {'shape': 'Labels'},
                'Legacy': {'shape': 'Text', 'deprecated': True},
            },
        },
        'PutWidgetResult': {
            'type': 'structure',
            'required': ['Widget'],
            'members': {
                'Widget': {'shape': 'Widget'},
                'RequestId': {'shape': 'Text', 'locationName': 'requestId'},
            },
        },
    },
}


# Query service whose Node shape contains a list of Node.
TREE_SERVICE = {
    'metadata': {
        'apiVersion': '2021-01-01',
        'endpointPrefix': 'trees',
        'protocol': 'query',
        'serviceFullName': 'Tree Service',
    },
    'operations': {
        'PutTree': {
            'http': {'method': 'POST', 'requestUri': '/'},
            'input': {'shape': 'PutTreeRequest'},
            'output': {'shape': 'PutTreeResult'},
        },
    },
    'shapes': {
        'Node': {
            'type': 'structure',
            'required': ['Name'],
            'members': {
                'Name': {'shape': 'String'},
                'Children': {'shape': 'NodeList'},
            },
        },
        'NodeList': {'type': 'list', 'member': {'shape': 'Node', 'locationName': 'member'}},
        'PutTreeRequest': {
            'type': 'structure',
            'required': ['Root'],
            'members': {'Root': {'shape': 'Node'}},
        },
        'PutTreeResult': {
            'type': 'structure',
            'members': {'Root': {'shape': 'Node'}},
        },
        'String': _string(),
    },
}


def load_service(content: dict):
    """Validate a fixture dict into a Service, leaving the fixture untouched."""
    from shapegen.codegen.loader import ServiceLoader

    return ServiceLoader().load_dict(copy.deepcopy(content))


def load_generated_module(source: str, directory: Path) -> ModuleType:
    """Import generated client source under a fresh module name."""
    name = f'generated_client_{next(_module_ids)}'
    path = directory / f'{name}.py'
    path.write_text(source, encoding='utf-8')

    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    spec.loader.exec_module(module)
    return module
