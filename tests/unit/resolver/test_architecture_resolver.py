"""Tests for library architecture resolution."""

import logging
from pathlib import Path

import pytest

from archresolver.config.library_properties import LibraryPropertiesError
from archresolver.config.platform_config import PlatformConfig
from archresolver.resolver.architecture_resolver import (
    ArchitectureResolver,
    ResolutionStatus,
    UnsupportedArchitectureError,
    build_unsupported_architectures_pattern,
    filter_unsupported_sources,
    find_library_properties,
    get_library_architectures,
    get_unsupported_architectures,
    is_architecture_supported,
    resolve_library_architecture,
)

KNOWN = ("avr", "megaavr", "sam", "samd", "esp32")


def make_library(root: Path, architectures=None, name="TestLib") -> Path:
    """Create a library directory, optionally with a library.properties."""
    root.mkdir(parents=True, exist_ok=True)
    if architectures is not None:
        (root / "library.properties").write_text(
            f"name={name}\nversion=1.0.0\narchitectures={architectures}\n"
        )
    return root


class TestFindLibraryProperties:
    """Test properties file lookup."""

    def test_found(self, tmp_path):
        lib = make_library(tmp_path / "Servo", "avr")
        assert find_library_properties(lib) == (lib / "library.properties").resolve()

    def test_relative_root(self, tmp_path, monkeypatch):
        make_library(tmp_path / "Servo", "avr")
        monkeypatch.chdir(tmp_path)
        result = find_library_properties("Servo")
        assert result is not None
        assert result.is_absolute()
        assert result == (tmp_path / "Servo" / "library.properties").resolve()

    def test_not_found_warns(self, tmp_path, caplog):
        lib = make_library(tmp_path / "Bare")
        with caplog.at_level(logging.WARNING):
            assert find_library_properties(lib) is None
        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.WARNING
        assert '"Bare"' in caplog.text
        assert "architecture-agnostic" in caplog.text


class TestArchitectureHelpers:
    """Test extraction, support check and pattern building."""

    def test_get_library_architectures(self, tmp_path):
        lib = make_library(tmp_path / "Lib", "AVR, esp32")
        assert get_library_architectures(lib / "library.properties") == ["avr", "esp32"]

    def test_get_library_architectures_missing_field(self, tmp_path):
        props = tmp_path / "library.properties"
        props.write_text("name=Foo\n")
        with pytest.raises(LibraryPropertiesError):
            get_library_architectures(props)

    @pytest.mark.parametrize("platform", ["avr", "esp32", "something-new"])
    def test_wildcard_supports_everything(self, platform):
        assert is_architecture_supported(["*"], platform)
        assert is_architecture_supported(["sam", "*"], platform)

    def test_supported_case_insensitive(self):
        assert is_architecture_supported(["AVR", "sam"], "avr")
        assert is_architecture_supported(["avr"], "AVR")

    def test_not_supported(self):
        assert not is_architecture_supported(["avr"], "esp32")

    def test_empty_list_supports_nothing(self):
        assert not is_architecture_supported([], "avr")

    def test_empty_platform_rejected(self):
        with pytest.raises(ValueError):
            is_architecture_supported(["avr"], "")

    def test_unsupported_set(self):
        assert get_unsupported_architectures(["avr", "sam"], KNOWN) == ["megaavr", "samd", "esp32"]

    def test_unsupported_set_wildcard(self):
        assert get_unsupported_architectures(["*"], KNOWN) == []

    def test_pattern_empty_when_all_supported(self):
        assert build_unsupported_architectures_pattern(["*"], KNOWN) == ""
        assert build_unsupported_architectures_pattern(list(KNOWN), KNOWN) == ""

    def test_pattern_is_alternation(self):
        pattern = build_unsupported_architectures_pattern(["avr", "megaavr", "sam", "samd"], KNOWN)
        assert "esp32" in pattern
        assert "avr" not in pattern.replace("megaavr", "")


class TestFilterUnsupportedSources:
    """Test source filtering."""

    def test_empty_pattern_is_identity(self):
        sources = ["a_esp32.cpp", "b_avr.cpp", "c.cpp"]
        assert filter_unsupported_sources("", sources) == sources

    def test_filters_tagged_sources(self):
        pattern = build_unsupported_architectures_pattern(["avr"], KNOWN)
        sources = ["core_avr.cpp", "core_esp32.cpp", "shared.cpp"]
        assert filter_unsupported_sources(pattern, sources) == ["core_avr.cpp", "shared.cpp"]

    def test_directory_tags(self):
        pattern = build_unsupported_architectures_pattern(["samd"], KNOWN)
        sources = ["src/avr/Servo.cpp", "src/samd/Servo.cpp", "src/sam/Servo.cpp", "src/Servo.cpp"]
        assert filter_unsupported_sources(pattern, sources) == [
            "src/samd/Servo.cpp",
            "src/Servo.cpp",
        ]

    def test_architecture_embedded_in_longer_name_not_matched(self):
        pattern = build_unsupported_architectures_pattern(["megaavr"], KNOWN)
        sources = ["src/megaavr/Servo.cpp", "src/avr/Servo.cpp"]
        assert filter_unsupported_sources(pattern, sources) == ["src/megaavr/Servo.cpp"]

    def test_order_preserved_and_subset(self):
        pattern = build_unsupported_architectures_pattern(["esp32"], KNOWN)
        sources = ["z.cpp", "x_sam.cpp", "m.cpp", "a_avr.c", "b.c"]
        result = filter_unsupported_sources(pattern, sources)
        assert result == ["z.cpp", "m.cpp", "b.c"]
        assert set(result) <= set(sources)

    def test_path_objects_preserved(self):
        pattern = build_unsupported_architectures_pattern(["avr"], KNOWN)
        keep = Path("src/avr/io.cpp")
        drop = Path("src/esp32/io.cpp")
        result = filter_unsupported_sources(pattern, [keep, drop])
        assert result == [keep]
        assert result[0] is keep

    def test_suffixed_tags(self):
        """Test that chip suffixes after an architecture tag still filter the source."""
        pattern = build_unsupported_architectures_pattern(["avr"])
        sources = [
            "shared.cpp",
            "src/stm32f4/Servo.cpp",
            "timer_samd21.c",
            "esp32s3_wifi.cpp",
            "nrf52840.c",
        ]
        assert filter_unsupported_sources(pattern, sources) == ["shared.cpp"]

    def test_supported_suffixed_tag_kept(self):
        pattern = build_unsupported_architectures_pattern(["esp32"])
        sources = ["src/esp32s3/i2s.cpp", "src/esp8266/i2s.cpp", "src/i2s.cpp"]
        assert filter_unsupported_sources(pattern, sources) == ["src/esp32s3/i2s.cpp", "src/i2s.cpp"]

    def test_longer_supported_name_not_matched_by_prefix(self):
        """Test that a supported 'samd' tag isn't taken for an unsupported 'sam' one."""
        pattern = build_unsupported_architectures_pattern(["samd"], KNOWN)
        sources = ["src/samd21/Servo.cpp", "src/sam3x/Servo.cpp", "src/sam/Servo.cpp"]
        assert filter_unsupported_sources(pattern, sources) == ["src/samd21/Servo.cpp"]

    def test_separated_architecture_names(self):
        """Test 'mbed' against 'mbed_nano' style names in both directions."""
        nano_only = build_unsupported_architectures_pattern(["mbed_nano"])
        sources = ["src/mbed_nano/pwm.cpp", "src/mbed/pwm.cpp", "src/mbed_portenta/pwm.cpp"]
        assert filter_unsupported_sources(nano_only, sources) == ["src/mbed_nano/pwm.cpp"]

        mbed_only = build_unsupported_architectures_pattern(["mbed"])
        assert filter_unsupported_sources(mbed_only, sources) == ["src/mbed/pwm.cpp"]

    def test_name_ending_with_other_architecture(self):
        """Test that 'rp2040' doesn't match inside a supported 'mbed_rp2040'."""
        pattern = build_unsupported_architectures_pattern(["mbed_rp2040"])
        sources = ["src/mbed_rp2040/pio.cpp", "src/rp2040/pio.cpp", "pio.cpp"]
        assert filter_unsupported_sources(pattern, sources) == ["src/mbed_rp2040/pio.cpp", "pio.cpp"]

    def test_default_universe_has_declared_names(self):
        """Test names real libraries declare are part of the default universe."""
        pattern = build_unsupported_architectures_pattern(["avr"])
        sources = ["src/renesas_uno/a.cpp", "src/mbed_nano/a.cpp", "src/stm32f4/a.cpp", "a.cpp"]
        assert filter_unsupported_sources(pattern, sources) == ["a.cpp"]

    def test_library_location_matched_without_root(self):
        """Test that without relative_to the whole path is matched."""
        pattern = build_unsupported_architectures_pattern(["avr"], KNOWN)
        source = "/home/dev/esp32-libs/Servo/src/Servo.cpp"
        assert filter_unsupported_sources(pattern, [source]) == []
        assert filter_unsupported_sources(
            pattern, [source], relative_to="/home/dev/esp32-libs/Servo"
        ) == [source]

    def test_root_location_ignored(self, tmp_path):
        """Test that an architecture name in the library's location doesn't filter it."""
        root = tmp_path / "esp32" / "Servo"
        pattern = build_unsupported_architectures_pattern(["avr"], KNOWN)
        sources = [str(root / "src" / "Servo.cpp"), str(root / "src" / "esp32" / "x.cpp")]
        assert filter_unsupported_sources(pattern, sources, relative_to=root) == [sources[0]]


class TestArchitectureResolver:
    """Test the top-level resolution flow."""

    @pytest.fixture
    def avr(self):
        return PlatformConfig(architecture="avr", known_architectures=KNOWN)

    @pytest.fixture
    def esp32(self):
        return PlatformConfig(architecture="esp32", known_architectures=KNOWN)

    def test_missing_properties_returns_sources(self, tmp_path, avr, caplog):
        lib = make_library(tmp_path / "Bare")
        with caplog.at_level(logging.WARNING):
            result = ArchitectureResolver(avr).resolve(lib, ["a.cpp", "b.cpp"])
        assert result.status is ResolutionStatus.OK
        assert result.sources == ["a.cpp", "b.cpp"]
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1

    def test_supported_filters_sources(self, tmp_path, avr):
        lib = make_library(tmp_path / "Core", "avr")
        result = ArchitectureResolver(avr).resolve(
            lib, ["core_avr.cpp", "core_esp32.cpp", "shared.cpp"]
        )
        assert result.success
        assert result.sources == ["core_avr.cpp", "shared.cpp"]
        assert result.library_name == "TestLib"

    def test_unsupported_architecture(self, tmp_path, esp32):
        lib = make_library(tmp_path / "Core", "avr", name="AvrOnly")
        result = ArchitectureResolver(esp32).resolve(lib, ["a.cpp"])
        assert result.status is ResolutionStatus.UNSUPPORTED_ARCHITECTURE
        assert result.sources == []
        assert "esp32" in result.message
        assert "AvrOnly" in result.message

    def test_wildcard_no_filtering(self, tmp_path, esp32):
        lib = make_library(tmp_path / "Any", "*")
        result = ArchitectureResolver(esp32).resolve(lib, ["a.cpp", "b_avr.cpp"])
        assert result.sources == ["a.cpp", "b_avr.cpp"]

    def test_wildcard_with_other_entries(self, tmp_path, esp32):
        """Test that '*' alongside named architectures still disables filtering."""
        lib = make_library(tmp_path / "Any", "avr,*", name="Mixed")
        result = ArchitectureResolver(esp32).resolve(lib, ["a.cpp", "b_avr.cpp", "c_sam.cpp"])
        assert result.success
        assert result.sources == ["a.cpp", "b_avr.cpp", "c_sam.cpp"]
        assert result.message == "Mixed supports all architectures"

    def test_empty_architectures_unsupported(self, tmp_path, avr):
        lib = make_library(tmp_path / "Empty", "")
        result = ArchitectureResolver(avr).resolve(lib, ["a.cpp"])
        assert result.status is ResolutionStatus.UNSUPPORTED_ARCHITECTURE

    def test_malformed_metadata(self, tmp_path, avr):
        lib = make_library(tmp_path / "Broken")
        (lib / "library.properties").write_text("name=Broken\n")
        result = ArchitectureResolver(avr).resolve(lib, ["a.cpp"])
        assert result.status is ResolutionStatus.MALFORMED_METADATA
        assert isinstance(result.error, LibraryPropertiesError)
        with pytest.raises(LibraryPropertiesError):
            result.raise_for_status()

    def test_explicit_properties_file(self, tmp_path, avr, caplog):
        lib = make_library(tmp_path / "Lib")
        props = tmp_path / "custom.properties"
        props.write_text("name=Custom\narchitectures=avr\n")
        with caplog.at_level(logging.WARNING):
            result = ArchitectureResolver(avr).resolve(lib, ["x_sam.cpp", "y.cpp"], props)
        assert result.sources == ["y.cpp"]
        assert result.properties_file == props
        assert caplog.records == []

    def test_explicit_properties_file_missing(self, tmp_path, avr):
        lib = make_library(tmp_path / "Lib")
        result = ArchitectureResolver(avr).resolve(lib, ["a.cpp"], tmp_path / "none.properties")
        assert result.status is ResolutionStatus.MALFORMED_METADATA

    def test_library_name_falls_back_to_directory(self, tmp_path, esp32):
        lib = make_library(tmp_path / "NoName")
        (lib / "library.properties").write_text("architectures=avr\n")
        result = ArchitectureResolver(esp32).resolve(lib, [])
        assert result.library_name == "NoName"


class TestResolveLibraryArchitecture:
    """Test the raising convenience wrapper."""

    def test_returns_filtered_sources(self, tmp_path):
        lib = make_library(tmp_path / "Core", "avr")
        platform = PlatformConfig(architecture="avr", known_architectures=KNOWN)
        assert resolve_library_architecture(lib, ["a_esp32.cpp", "b.cpp"], platform) == ["b.cpp"]

    def test_raises_on_unsupported(self, tmp_path):
        lib = make_library(tmp_path / "Core", "avr", name="AvrOnly")
        platform = PlatformConfig(architecture="esp32")
        with pytest.raises(UnsupportedArchitectureError) as exc_info:
            resolve_library_architecture(lib, ["a.cpp"], platform)
        assert exc_info.value.library == "AvrOnly"
        assert exc_info.value.architecture == "esp32"
        assert "isn't supported by the AvrOnly library" in str(exc_info.value)
