"""Test suite for the recorded sample response helpers."""

import ast
import logging

from shapegen.codegen.ast_utils import _render
from shapegen.codegen.samples import (
    Response,
    find_responses,
    responses_for,
    sample_data_dir,
    sample_test_function,
)

from .fixtures import EC2_SERVICE, S3_SERVICE, SAMPLE_DATA_DIR, load_service


class TestFindResponses:
    """Tests for find_responses()."""

    def test_sample_data(self):
        """Test that the bundled corpus is found and sorted."""
        responses = find_responses(SAMPLE_DATA_DIR)
        assert [r.file_name for r in responses] == [
            'ec2-create-volume.xml',
            'ec2-describe-volumes.xml',
            's3-list-buckets.xml',
        ]
        assert responses[1] == Response('ec2', 'describe-volumes', 'ec2-describe-volumes.xml')

    def test_ignores_other_files(self, tmp_path):
        """Test that files outside the naming scheme are skipped."""
        (tmp_path / 'README.txt').write_text('notes')
        (tmp_path / 'S3-ListBuckets.xml').write_text('<a/>')
        (tmp_path / 's3-get-object.xml').write_text('<a/>')
        (tmp_path / 'sqs-send-message.xml').mkdir()

        assert [r.file_name for r in find_responses(tmp_path)] == ['s3-get-object.xml']

    def test_missing_directory(self, tmp_path):
        """Test that a missing or unset directory yields nothing."""
        assert find_responses(tmp_path / 'nope') == []
        assert find_responses(None) == []


class TestResponsesFor:
    """Tests for responses_for()."""

    def test_pairs_by_service(self):
        """Test that only the service's own responses are matched."""
        responses = find_responses(SAMPLE_DATA_DIR)

        s3 = load_service(S3_SERVICE)
        matched = responses_for(s3, responses)
        assert [(r.file_name, o.name) for r, o in matched] == [
            ('s3-list-buckets.xml', 'ListBuckets')
        ]

        ec2 = load_service(EC2_SERVICE)
        assert [o.name for _, o in responses_for(ec2, responses)] == [
            'CreateVolume',
            'DescribeVolumes',
        ]

    def test_unknown_operation_is_dropped(self, caplog):
        """Test that a response naming no operation is logged and skipped."""
        service = load_service(S3_SERVICE)
        responses = [Response('s3', 'delete-everything', 's3-delete-everything.xml')]

        with caplog.at_level(logging.WARNING):
            assert responses_for(service, responses) == []
        assert 's3-delete-everything.xml' in caplog.text


class TestSampleTestFunction:
    """Tests for the generated sample tests."""

    def test_without_input(self):
        """Test the function built for an operation without input."""
        service = load_service(S3_SERVICE)
        response = Response('s3', 'list-buckets', 's3-list-buckets.xml')
        source = _render(
            [sample_test_function(service, response, service.operations['ListBuckets'], [])]
        )

        assert source.startswith('def test_parse_s3_list_buckets():')
        assert "MockResponseReader.read_response(SAMPLE_DATA_DIR, 's3-list-buckets.xml')" in source
        assert 'MockRequestDispatcher.with_status(200).with_body(mock_response)' in source
        assert "S3Client(MockCredentialsProvider(), 'us-east-1', dispatcher=mock)" in source
        assert 'result = client.list_buckets()' in source

    def test_with_input_and_checks(self):
        """Test that a default request is built and checks are appended."""
        service = load_service(EC2_SERVICE)
        response = Response('ec2', 'describe-volumes', 'ec2-describe-volumes.xml')
        source = _render(
            [
                sample_test_function(
                    service,
                    response,
                    service.operations['DescribeVolumes'],
                    [_result_check()],
                )
            ]
        )

        assert source.startswith('def test_parse_ec2_describe_volumes():')
        assert 'request = DescribeVolumesRequest()' in source
        assert 'result = client.describe_volumes(request)' in source
        assert source.splitlines()[-1] == '    assert result is not None'

    def test_sample_data_dir(self):
        """Test the module level constant pointing at the corpus."""
        assert _render([sample_data_dir('tests/sample-data')]) == (
            "SAMPLE_DATA_DIR = 'tests/sample-data'"
        )


def _result_check():
    return ast.Assert(
        test=ast.Compare(
            left=ast.Name(id='result', ctx=ast.Load()),
            ops=[ast.IsNot()],
            comparators=[ast.Constant(None)],
        )
    )
