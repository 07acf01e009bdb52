"""Test suite for the XML event stream helpers used by generated deserializers."""

import pytest

from shapegen.runtime.errors import XmlParseError
from shapegen.runtime.xmlutil import (
    XmlEventKind,
    XmlResponse,
    characters,
    end_element,
    optional_string_field,
    parse_bool,
    parse_float,
    parse_int,
    peek_at_name,
    skip_tree,
    start_element,
    string_field,
    render_xml,
)


def _stack(body: str) -> XmlResponse:
    stack = XmlResponse.from_body(body)
    assert stack.next().kind is XmlEventKind.START_DOCUMENT
    return stack


class TestXmlResponse:
    """Tests for XmlResponse."""

    def test_peek_does_not_consume(self):
        """Test that peek() returns the same event until next() is called."""
        stack = XmlResponse.from_body('<A/>')
        assert stack.peek() is stack.peek()
        assert stack.next().kind is XmlEventKind.START_DOCUMENT
        assert stack.peek().local_name == 'A'

    def test_leading_whitespace_before_declaration(self):
        """Test that blank lines before the XML declaration are accepted."""
        stack = _stack('\n\n<?xml version="1.0" encoding="UTF-8"?>\n<A>1</A>')
        assert string_field('A', stack) == '1'

    def test_namespaces_are_stripped(self):
        """Test that names are reported without namespace."""
        stack = _stack('<A xmlns="http://example.com/ns"><B>x</B></A>')
        start_element('A', stack)
        assert peek_at_name(stack) == 'B'

    def test_attributes(self):
        """Test that start_element returns the element attributes."""
        stack = _stack('<A id="1" kind="x"/>')
        assert start_element('A', stack) == {'id': '1', 'kind': 'x'}

    def test_malformed_document(self):
        """Test that broken XML raises XmlParseError while iterating."""
        with pytest.raises(XmlParseError, match='Malformed XML'):
            list(XmlResponse.from_body('<A><B></A>'))

    def test_iteration_ends(self):
        """Test that iterating a stream yields the element events in order."""
        kinds = [event.kind for event in XmlResponse.from_body('<A/>')]
        assert kinds[:3] == [
            XmlEventKind.START_DOCUMENT,
            XmlEventKind.START_ELEMENT,
            XmlEventKind.END_ELEMENT,
        ]


class TestElementHelpers:
    """Tests for start_element(), end_element() and characters()."""

    def test_wrong_start_tag(self):
        """Test that an unexpected start tag is an error."""
        with pytest.raises(XmlParseError, match='START Expected A got B'):
            start_element('A', _stack('<B/>'))

    def test_wrong_end_tag(self):
        """Test that a missing end tag is an error."""
        stack = _stack('<A><B/></A>')
        start_element('A', stack)
        with pytest.raises(XmlParseError, match='Expected EndElement A'):
            end_element('A', stack)

    def test_truncated_stream(self):
        """Test that running out of events is an error."""
        stack = _stack('<A/>')
        start_element('A', stack)
        end_element('A', stack)
        stack.next()
        with pytest.raises(XmlParseError):
            start_element('B', stack)

    def test_characters_joins_chunks(self):
        """Test that entity-split text is returned in one piece."""
        assert string_field('A', _stack('<A>a &amp; b</A>')) == 'a & b'

    def test_empty_element_yields_empty_text(self):
        """Test that <A/> has empty character content."""
        assert string_field('A', _stack('<A/>')) == ''

    def test_characters_rejects_child_element(self):
        """Test that a child where text was expected is an error."""
        stack = _stack('<A><B/></A>')
        start_element('A', stack)
        with pytest.raises(XmlParseError, match='Expected characters'):
            characters(stack)

    def test_peek_at_name_skips_whitespace(self):
        """Test that insignificant whitespace is stepped over."""
        stack = _stack('<A>\n    <B>1</B>\n</A>')
        start_element('A', stack)
        assert peek_at_name(stack) == 'B'
        string_field('B', stack)
        assert peek_at_name(stack) == ''
        end_element('A', stack)

    def test_optional_string_field(self):
        """Test that optional fields are read only when present."""
        stack = _stack('<A><B>1</B></A>')
        start_element('A', stack)
        assert optional_string_field('C', stack) is None
        assert optional_string_field('B', stack) == '1'


class TestSkipTree:
    """Tests for skip_tree()."""

    def test_skips_nested_subtree(self):
        """Test that the whole subtree and nothing more is consumed."""
        stack = _stack('<A><X><Y><Z>1</Z></Y><Y/></X><B>2</B></A>')
        start_element('A', stack)
        assert peek_at_name(stack) == 'X'

        skip_tree(stack)

        assert string_field('B', stack) == '2'
        end_element('A', stack)

    def test_skips_empty_element(self):
        """Test skipping a self-closing element."""
        stack = _stack('<A><X/><B>2</B></A>')
        start_element('A', stack)
        peek_at_name(stack)
        skip_tree(stack)
        assert string_field('B', stack) == '2'


class TestPrimitiveParsing:
    """Tests for the primitive text parsers."""

    @pytest.mark.parametrize('text, expected', [('42', 42), (' -7 ', -7), ('9000000000', 9000000000)])
    def test_parse_int(self, text, expected):
        """Test integer parsing."""
        assert parse_int(text) == expected

    @pytest.mark.parametrize('text', ['', 'big', '1.5'])
    def test_parse_int_malformed(self, text):
        """Test that malformed integers raise XmlParseError."""
        with pytest.raises(XmlParseError, match='Expected an integer'):
            parse_int(text)

    def test_parse_float(self):
        """Test floating point parsing."""
        assert parse_float('0.25') == 0.25
        with pytest.raises(XmlParseError):
            parse_float('n/a')

    @pytest.mark.parametrize('text, expected', [('true', True), ('False', False), (' TRUE ', True)])
    def test_parse_bool(self, text, expected):
        """Test boolean parsing."""
        assert parse_bool(text) is expected

    def test_parse_bool_malformed(self):
        """Test that anything but true/false is rejected."""
        with pytest.raises(XmlParseError, match='Expected a boolean'):
            parse_bool('yes')


class TestRenderXml:
    """Tests for render_xml(), used for rest-xml payloads."""

    def test_text_is_escaped(self):
        """Test that element text is escaped."""
        assert render_xml('Key', 'a<b & c>') == '<Key>a&lt;b &amp; c&gt;</Key>'

    def test_nested_content(self):
        """Test that dicts become child elements in insertion order."""
        content = {'TagSet': {'Tag': [{'Key': 'k', 'Value': 'v'}]}}
        assert render_xml('Tagging', content) == (
            '<Tagging><TagSet><Tag><Key>k</Key><Value>v</Value></Tag></TagSet></Tagging>'
        )

    def test_list_repeats_the_element(self):
        """Test that list content is written as repeated elements."""
        entries = [{'key': 'a', 'value': '1'}, {'key': 'b', 'value': '2'}]
        assert render_xml('Labels', entries) == (
            '<Labels><key>a</key><value>1</value></Labels>'
            '<Labels><key>b</key><value>2</value></Labels>'
        )

    def test_empty_content(self):
        """Test that empty containers are written as short elements."""
        assert render_xml('TagSet', {'Tag': []}) == '<TagSet/>'
        assert render_xml('Name', '') == '<Name/>'

    def test_rendered_text_parses_back(self):
        """Test that rendered elements read back through XmlResponse."""
        stack = _stack(render_xml('Tag', {'Key': 'a&b', 'Value': ''}))
        start_element('Tag', stack)
        assert string_field('Key', stack) == 'a&b'
        assert string_field('Value', stack) == ''
        end_element('Tag', stack)
