import io
import unittest
import xml.etree.ElementTree as ET

from xmlstreamer import CLOSE, Attr, Close, Tag, Text, WriterOpts, WriterState, XMLStreamer

PROLOG = '<?xml version="1.0" encoding="UTF-16"?>'


def write(*ops, **opts):
    out = io.StringIO()
    writer = XMLStreamer(out, WriterOpts(**opts))
    for op in ops:
        writer.submit(op)
    return out.getvalue()


def fragment(*ops, **opts):
    return write(*ops, prolog=False, **opts)


class TestProlog(unittest.TestCase):
    def test_prolog_written_at_construction(self):
        out = io.StringIO()
        XMLStreamer(out)
        assert out.getvalue() == PROLOG

    def test_encoding_label_is_configurable(self):
        assert write(encoding="UTF-8") == '<?xml version="1.0" encoding="UTF-8"?>'

    def test_prolog_can_be_disabled(self):
        assert write(prolog=False) == ""


class TestDocumentLayout(unittest.TestCase):
    def test_child_with_text(self):
        """Flushed text suppresses the newline before the following end tag."""
        output = write(Tag("root"), Tag("child"), Text("hi"), CLOSE, CLOSE)
        assert output == PROLOG + "\n<root>\n\t<child>hi</child>\n</root>"

    def test_empty_element_self_closes(self):
        assert fragment(Tag("x"), CLOSE) == "\n<x />"

    def test_element_with_attribute_self_closes(self):
        assert fragment(Tag("x"), Attr("a"), Text("1"), CLOSE) == '\n<x a="1" />'

    def test_indentation_follows_depth(self):
        output = fragment(Tag("a"), Tag("b"), Tag("c"), CLOSE, CLOSE, CLOSE)
        assert output == "\n<a>\n\t<b>\n\t\t<c />\n\t</b>\n</a>"

    def test_custom_indent(self):
        output = fragment(Tag("a"), Tag("b"), Tag("c"), CLOSE, CLOSE, CLOSE, indent="  ")
        assert output == "\n<a>\n  <b>\n    <c />\n  </b>\n</a>"

    def test_text_then_sibling_tag(self):
        output = fragment(Tag("r"), Text("a"), Tag("b"), CLOSE, CLOSE)
        assert output == "\n<r>a<b />\n</r>"

    def test_attribute_then_child(self):
        output = fragment(Tag("r"), Attr("id"), Text("7"), Tag("c"), CLOSE, CLOSE)
        assert output == '\n<r id="7">\n\t<c />\n</r>'

    def test_unfinished_attribute_before_child(self):
        output = fragment(Tag("r"), Attr("flag"), Tag("c"), CLOSE, CLOSE)
        assert output == '\n<r flag="">\n\t<c />\n</r>'

    def test_consecutive_attributes_without_value(self):
        output = fragment(Tag("x"), Attr("a"), Attr("b"), Text("2"), CLOSE)
        assert output == '\n<x a="" b="2" />'

    def test_second_append_after_attribute_is_element_text(self):
        output = fragment(Tag("x"), Attr("a"), Text("1"), Text("t"), CLOSE)
        assert output == '\n<x a="1">t</x>'

    def test_no_trailing_newline_and_no_auto_close(self):
        output = fragment(Tag("a"), Tag("b"))
        assert output == "\n<a>\n\t<b"


class TestTextEscaping(unittest.TestCase):
    def test_text_is_escaped(self):
        output = fragment(Tag("p"), Text("a<b & \"c\" 'd' >"), CLOSE)
        assert output == "\n<p>a&lt;b &amp; &quot;c&quot; &apos;d&apos; &gt;</p>"

    def test_attribute_value_is_escaped(self):
        output = fragment(Tag("p"), Attr("title"), Text('"x" & <y>'), CLOSE)
        assert output == '\n<p title="&quot;x&quot; &amp; &lt;y&gt;" />'

    def test_fragments_form_one_run(self):
        output = fragment(Tag("p"), Text("a&"), Text("b"), Text("<"), CLOSE)
        assert output == "\n<p>a&amp;b&lt;</p>"

    def test_non_string_values_are_converted(self):
        out = io.StringIO()
        writer = XMLStreamer(out, WriterOpts(prolog=False))
        writer << Tag("n") << 42 << CLOSE
        writer << Tag("f") << 1.5 << CLOSE
        assert out.getvalue() == "\n<n>42</n>\n<f>1.5</f>"


class TestPermissiveFallbacks(unittest.TestCase):
    def test_close_with_nothing_open_is_noop(self):
        out = io.StringIO()
        writer = XMLStreamer(out, WriterOpts(prolog=False))
        writer.close()
        assert out.getvalue() == ""
        assert writer.state == WriterState.IDLE
        assert writer.depth == 0

    def test_extra_close_after_document(self):
        output = fragment(Tag("a"), CLOSE, CLOSE, CLOSE)
        assert output == "\n<a />"

    def test_attribute_without_tag_opens_implicit_tag(self):
        output = fragment(Attr("a"), Text("1"), CLOSE)
        assert output == '\n<!-- a="1" />'

    def test_attribute_after_text_opens_implicit_tag(self):
        out = io.StringIO()
        writer = XMLStreamer(out, WriterOpts(prolog=False))
        writer.tag("r").text("hi").attr("a")
        assert out.getvalue() == '\n<r>hi\n\t<!-- a="'
        assert writer.open_tags == ("r", "!--")
        assert writer.state == WriterState.ATTRIBUTE_OPEN

    def test_fallbacks_are_logged(self):
        out = io.StringIO()
        writer = XMLStreamer(out, WriterOpts(prolog=False))
        with self.assertLogs("xmlstreamer.writer", level="DEBUG") as logs:
            writer.close()
        assert "close-without-open-tag" in logs.output[0]


class TestWriterSurface(unittest.TestCase):
    def setUp(self):
        self.out = io.StringIO()
        self.writer = XMLStreamer(self.out, WriterOpts(prolog=False))

    def test_chained_methods(self):
        self.writer.tag("a").attr("x").text("1").text("body").close()
        assert self.out.getvalue() == '\n<a x="1">body</a>'

    def test_attribute_helper(self):
        self.writer.tag("a").attribute("x", "1").attribute("y", "").close()
        assert self.out.getvalue() == '\n<a x="1" y="" />'

    def test_element_helper(self):
        self.writer.tag("list")
        self.writer.element("item", "x & y", id="1")
        self.writer.element("empty")
        self.writer.close()
        assert self.out.getvalue() == '\n<list>\n\t<item id="1">x &amp; y</item>\n\t<empty />\n</list>'

    def test_element_accepts_name_attribute(self):
        self.writer.element("param", "v", name="x")
        assert self.out.getvalue() == '\n<param name="x">v</param>'

    def test_element_text_keyword_is_content(self):
        self.writer.element("p", text="hi", id="1")
        assert self.out.getvalue() == '\n<p id="1">hi</p>'

    def test_close_class_is_accepted_as_close(self):
        self.writer << Tag("a") << Close
        assert self.out.getvalue() == "\n<a />"
        assert self.writer.depth == 0

    def test_other_operation_classes_are_rejected(self):
        self.writer.tag("a")
        for op in (Tag, Attr, Text):
            with self.subTest(op=op.__name__):
                with self.assertRaises(TypeError):
                    self.writer.submit(op)
        assert self.out.getvalue() == "\n<a"
        assert self.writer.state == WriterState.TAG_OPEN

    def test_close_all(self):
        self.writer.tag("a").tag("b").text("t").close_all()
        assert self.out.getvalue() == "\n<a>\n\t<b>t</b>\n</a>"
        assert self.writer.depth == 0
        assert self.writer.state == WriterState.IDLE

    def test_state_and_depth_tracking(self):
        assert self.writer.state == WriterState.IDLE
        self.writer.tag("a")
        assert self.writer.state == WriterState.TAG_OPEN
        self.writer.attr("x")
        assert self.writer.state == WriterState.ATTRIBUTE_OPEN
        self.writer.text("v")
        assert self.writer.state == WriterState.TAG_OPEN
        self.writer.text("t")
        assert self.writer.state == WriterState.TEXT_PENDING
        self.writer.tag("b")
        assert self.writer.open_tags == ("a", "b")
        assert self.writer.depth == 2

    def test_pending_text_is_not_written_until_flush(self):
        self.writer.tag("a").text("held")
        assert self.out.getvalue() == "\n<a>"
        self.writer.close()
        assert self.out.getvalue() == "\n<a>held</a>"

    def test_finish_flushes_top_level_text(self):
        self.writer.text("x&y").finish()
        assert self.out.getvalue() == "x&amp;y"
        assert self.writer.state == WriterState.IDLE

    def test_finish_warns_about_unclosed_tags(self):
        self.writer.tag("a").tag("b")
        with self.assertLogs("xmlstreamer.writer", level="WARNING") as logs:
            self.writer.finish()
        assert "a/b" in logs.output[0]
        assert self.out.getvalue() == "\n<a>\n\t<b"

    def test_context_manager_leaves_sink_open(self):
        with XMLStreamer(self.out, WriterOpts(prolog=False)) as writer:
            writer.element("a")
        assert not self.out.closed
        assert self.out.getvalue() == "\n<a />"

    def test_debug_logs_every_transition(self):
        writer = XMLStreamer(io.StringIO(), WriterOpts(prolog=False), debug=True)
        with self.assertLogs("xmlstreamer.writer", level="DEBUG") as logs:
            writer.tag("a").close()
        assert len(logs.output) == 2
        assert "IDLE" in logs.output[0]
        assert "TAG_OPEN" in logs.output[0]

    def test_sink_errors_propagate(self):
        class BrokenSink:
            def write(self, text):
                raise OSError("disk full")

        with self.assertRaises(OSError):
            XMLStreamer(BrokenSink())

    def test_repr(self):
        self.writer.tag("a")
        assert repr(self.writer) == "XMLStreamer(state=TAG_OPEN, open_tags=('a',))"


class TestWellFormedOutput(unittest.TestCase):
    def test_output_parses_and_mirrors_operations(self):
        out = io.StringIO()
        writer = XMLStreamer(out, WriterOpts(prolog=False))
        writer.tag("catalog").attribute("owner", "O'Brien & <Sons>")
        writer.tag("book").attribute("id", "1")
        writer.element("title", 'The "Quoted" Title')
        writer.element("price", 12)
        writer.close()
        writer.tag("book").attribute("id", "2").close()
        writer.tag("note").text("a < b").text(" && c").close()
        writer.close()

        root = ET.fromstring(out.getvalue())
        assert root.tag == "catalog"
        assert root.get("owner") == "O'Brien & <Sons>"
        assert [child.tag for child in root] == ["book", "book", "note"]
        first = root[0]
        assert first.get("id") == "1"
        assert first.find("title").text == 'The "Quoted" Title'
        assert first.find("price").text == "12"
        assert len(root[1]) == 0
        assert root[2].text == "a < b && c"

    def test_full_document_with_prolog_parses(self):
        out = io.StringIO()
        writer = XMLStreamer(out, WriterOpts(encoding="UTF-8"))
        writer.element("doc", "text")
        root = ET.fromstring(out.getvalue().encode("utf-8"))
        assert root.tag == "doc"
        assert root.text == "text"
