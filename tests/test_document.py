"""Tests for opnconf/store/document.py"""

import copy
import xml.etree.ElementTree as ET

import pytest

from opnconf.exceptions import DocumentError, SectionNotFoundError
from opnconf.store.document import ConfigDocument, _detect_indent, get_text


class TestGetText:
    def test_none_element_returns_default(self):
        assert get_text(None) == ""
        assert get_text(None, "x") == "x"

    def test_empty_element_returns_default(self):
        assert get_text(ET.fromstring("<a/>"), "d") == "d"

    def test_text(self):
        assert get_text(ET.fromstring("<a>igb1</a>")) == "igb1"


class TestDetectIndent:
    def test_two_spaces(self):
        assert _detect_indent(ET.fromstring("<r>\n  <a/>\n</r>")) == "  "

    def test_tabs(self):
        assert _detect_indent(ET.fromstring("<r>\n\t<a/>\n</r>")) == "\t"

    def test_falls_back_to_default(self):
        assert _detect_indent(ET.fromstring("<r><a/></r>")) == "  "


class TestLoad:
    def test_load_sample(self, config_file):
        doc = ConfigDocument.load(config_file)
        assert doc.root.tag == "opnsense"
        assert doc.path == config_file
        assert doc.declaration == b'<?xml version="1.0"?>'
        assert doc.indent_unit == "  "

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentError) as exc_info:
            ConfigDocument.load(tmp_path / "nope.xml")
        assert "does not exist" in str(exc_info.value)

    def test_malformed_xml(self, make_config):
        path = make_config("<opnsense><vlans></opnsense>")
        with pytest.raises(DocumentError) as exc_info:
            ConfigDocument.load(path)
        assert "Failed to parse XML" in str(exc_info.value)

    def test_wrong_root_element(self, make_config):
        path = make_config("<pfsense><vlans/></pfsense>")
        with pytest.raises(DocumentError) as exc_info:
            ConfigDocument.load(path)
        assert "<pfsense>" in str(exc_info.value)

    def test_custom_root_tag(self, make_config):
        path = make_config("<pfsense><vlans/></pfsense>")
        doc = ConfigDocument.load(path, root_tag="pfsense")
        assert doc.root.tag == "pfsense"

    def test_no_declaration(self, make_config):
        doc = ConfigDocument.load(make_config("<opnsense/>"))
        assert doc.declaration is None


class TestSection:
    def test_existing_section(self, config_file):
        doc = ConfigDocument.load(config_file)
        assert doc.section("vlans").tag == "vlans"

    def test_missing_section_raises(self, make_config):
        doc = ConfigDocument.load(make_config("<opnsense>\n  <interfaces/>\n</opnsense>\n"))
        with pytest.raises(SectionNotFoundError) as exc_info:
            doc.section("vlans")
        assert exc_info.value.section == "vlans"

    def test_missing_section_is_not_created(self, make_config):
        doc = ConfigDocument.load(make_config("<opnsense/>"))
        with pytest.raises(SectionNotFoundError):
            doc.section("filter")
        assert doc.find_section("filter") is None


class TestRoundTrip:
    def test_save_without_changes_is_byte_identical(self, config_file, sample_config_text):
        ConfigDocument.load(config_file).save()
        assert config_file.read_text() == sample_config_text

    def test_comments_are_preserved(self, config_file):
        ConfigDocument.load(config_file).save()
        assert "<!-- managed by ansible -->" in config_file.read_text()

    def test_save_leaves_no_temp_files(self, config_file):
        ConfigDocument.load(config_file).save()
        assert [p.name for p in config_file.parent.iterdir()] == ["config.xml"]

    def test_save_without_declaration(self, make_config):
        path = make_config("<opnsense>\n  <vlans />\n</opnsense>\n")
        ConfigDocument.load(path).save()
        assert path.read_text() == "<opnsense>\n  <vlans />\n</opnsense>\n"

    def test_comments_outside_root_are_preserved(self, make_config):
        text = '<?xml version="1.0"?>\n<!-- exported 2024-05-01 -->\n<opnsense>\n  <vlans/>\n</opnsense>\n<!-- end -->\n'
        path = make_config(text)
        doc = ConfigDocument.load(path)
        doc.append_entry(doc.section("vlans"), ET.Element("vlan"))
        doc.save()

        assert path.read_text() == (
            '<?xml version="1.0"?>\n<!-- exported 2024-05-01 -->\n'
            "<opnsense>\n  <vlans>\n    <vlan/>\n  </vlans>\n</opnsense>\n<!-- end -->\n"
        )


class TestSourceFormPreserved:
    """Bytes outside the new entries are written back exactly as they were read."""

    SOURCE = (
        "<opnsense>\n"
        "  <system>\n"
        "    <descr></descr>\n"
        "    <note attr='x'>a &quot;b&quot; &amp; c</note>\n"
        "    <empty   />\n"
        "  </system>\n"
        "  <vlans>\n"
        "  </vlans>\n"
        "  <nat>\n"
        "    <enable/>\n"
        "  </nat>\n"
        "</opnsense>\n"
    )

    def test_untouched_sections_keep_their_spelling(self, make_config):
        path = make_config(self.SOURCE)
        doc = ConfigDocument.load(path)
        vlan = ET.Element("vlan")
        ET.SubElement(vlan, "tag").text = "20"
        ET.SubElement(vlan, "descr")
        doc.append_entry(doc.section("vlans"), vlan)
        doc.save()

        assert path.read_text() == self.SOURCE.replace(
            "  <vlans>\n  </vlans>\n",
            "  <vlans>\n    <vlan>\n      <tag>20</tag>\n      <descr/>\n    </vlan>\n  </vlans>\n",
        )

    @pytest.mark.parametrize("empty_section", ["<vlans/>", "<vlans />", "<vlans></vlans>"])
    def test_empty_section_spellings(self, make_config, empty_section):
        path = make_config(f"<opnsense>\n  {empty_section}\n  <nat>\n    <enable/>\n  </nat>\n</opnsense>\n")
        doc = ConfigDocument.load(path)
        doc.append_entry(doc.section("vlans"), ET.Element("vlan"))
        doc.save()

        assert path.read_text() == (
            "<opnsense>\n  <vlans>\n    <vlan/>\n  </vlans>\n  <nat>\n    <enable/>\n  </nat>\n</opnsense>\n"
        )

    def test_section_with_attributes_expanded(self, make_config):
        path = make_config("<opnsense>\n  <vlans version='1.0.0'/>\n</opnsense>\n")
        doc = ConfigDocument.load(path)
        doc.append_entry(doc.section("vlans"), ET.Element("vlan"))
        doc.save()

        assert path.read_text() == "<opnsense>\n  <vlans version='1.0.0'>\n    <vlan/>\n  </vlans>\n</opnsense>\n"

    def test_crlf_newlines_kept(self, tmp_path):
        path = tmp_path / "config.xml"
        path.write_bytes(b"<opnsense>\r\n  <vlans>\r\n    <vlan/>\r\n  </vlans>\r\n</opnsense>\r\n")
        doc = ConfigDocument.load(path)
        vlan = ET.Element("vlan")
        ET.SubElement(vlan, "tag").text = "7"
        doc.append_entry(doc.section("vlans"), vlan)
        doc.save()

        assert path.read_bytes() == (
            b"<opnsense>\r\n  <vlans>\r\n    <vlan/>\r\n"
            b"    <vlan>\r\n      <tag>7</tag>\r\n    </vlan>\r\n  </vlans>\r\n</opnsense>\r\n"
        )

    def test_declared_encoding_used_for_new_entries(self, tmp_path):
        path = tmp_path / "config.xml"
        original = '<?xml version="1.0" encoding="ISO-8859-1"?>\n<opnsense>\n  <vlans/>\n</opnsense>\n'
        path.write_bytes(original.encode("latin-1"))
        doc = ConfigDocument.load(path)
        assert doc.encoding == "ISO-8859-1"

        vlan = ET.Element("vlan")
        ET.SubElement(vlan, "descr").text = "Büro"
        doc.append_entry(doc.section("vlans"), vlan)
        doc.save()

        assert "<descr>Büro</descr>".encode("latin-1") in path.read_bytes()

    def test_second_save_appends_after_first(self, config_file):
        doc = ConfigDocument.load(config_file)
        vlans = doc.section("vlans")
        first = ET.Element("vlan")
        ET.SubElement(first, "tag").text = "30"
        doc.append_entry(vlans, first)
        doc.save()
        second = ET.Element("vlan")
        ET.SubElement(second, "tag").text = "31"
        doc.append_entry(vlans, second)
        doc.save()

        text = config_file.read_text()
        assert text.count("<vlan>") == 3
        assert text.index("<tag>30</tag>") < text.index("<tag>31</tag>") < text.index("</vlans>")
        assert [get_text(v.find("tag")) for v in ConfigDocument.load(config_file).section("vlans")] == [
            "10",
            "30",
            "31",
        ]


class TestAppendEntry:
    def test_append_to_populated_section(self, config_file):
        doc = ConfigDocument.load(config_file)
        vlan = ET.Element("vlan")
        ET.SubElement(vlan, "if").text = "igb2"
        ET.SubElement(vlan, "tag").text = "30"
        doc.append_entry(doc.section("vlans"), vlan)
        doc.save()

        expected = (
            "  <vlans>\n"
            "    <vlan>\n"
            "      <if>igb1</if>\n"
            "      <tag>10</tag>\n"
            "      <descr>VLAN_10</descr>\n"
            "    </vlan>\n"
            "    <vlan>\n"
            "      <if>igb2</if>\n"
            "      <tag>30</tag>\n"
            "    </vlan>\n"
            "  </vlans>\n"
            "  <filter>\n"
        )
        assert expected in config_file.read_text()

    def test_append_to_empty_section(self, make_config):
        path = make_config("<opnsense>\n  <vlans />\n</opnsense>\n")
        doc = ConfigDocument.load(path)
        vlan = ET.Element("vlan")
        ET.SubElement(vlan, "tag").text = "5"
        doc.append_entry(doc.section("vlans"), vlan)
        doc.save()

        assert path.read_text() == (
            "<opnsense>\n"
            "  <vlans>\n"
            "    <vlan>\n"
            "      <tag>5</tag>\n"
            "    </vlan>\n"
            "  </vlans>\n"
            "</opnsense>\n"
        )

    def test_append_copy_keeps_inner_whitespace(self, config_file):
        doc = ConfigDocument.load(config_file)
        filter_section = doc.section("filter")
        source = filter_section.find("rule")
        before = doc.tostring(source)

        doc.append_entry(filter_section, copy.deepcopy(source), fresh=False)
        assert doc.tostring(filter_section[-1]) == before

    def test_other_sections_untouched(self, config_file):
        original = config_file.read_bytes()
        doc = ConfigDocument.load(config_file)
        doc.append_entry(doc.section("vlans"), ET.Element("vlan"))
        doc.save()

        assert config_file.read_bytes() == original.replace(b"\n  </vlans>", b"\n    <vlan/>\n  </vlans>")

    def test_element_outside_document_rejected(self, config_file):
        doc = ConfigDocument.load(config_file)
        with pytest.raises(ValueError):
            doc.append_entry(ET.Element("orphan"), ET.Element("child"))


class TestToString:
    def test_excludes_tail(self, config_file):
        doc = ConfigDocument.load(config_file)
        text = doc.tostring(doc.section("version"))
        assert text == "<version>24.7</version>"
        # the element itself keeps its tail
        assert doc.section("version").tail == "\n  "
