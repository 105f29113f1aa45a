"""
Example Usage Script - Simple demonstration of shapematch

This script shows how to use the individual components for testing and
learning purposes:
- declaring a record shape on a pydantic model
- compiling it once and unmarshalling command output into it
- the errors you get for broken shapes and unmatched input
- exporting many scraped records to CSV
"""

import logging
from typing import Annotated

from pydantic import BaseModel, Field

import config
from exporters import RecordTableExporter
from matchers import CompileError, MatchError, compile_shape, compile_with_delimiter
from shapes import FieldKind


class OpusencReport(BaseModel):
    """Summary printed by opusenc when an encode finishes."""

    encoded: str = Field("", json_schema_extra={"match": r"Encoded: (.+)"})
    runtime: str = Field("", json_schema_extra={"match": r"Runtime: (.+)"})
    realtime_mult: Annotated[float, FieldKind.FLOAT32] = Field(0.0, description=r"\((.+)x realtime\)")
    wrote_bytes: Annotated[int, FieldKind.UINT64] = Field(0, description=r"Wrote: (\d+) bytes")
    bitrate: Annotated[float, FieldKind.FLOAT32] = Field(0.0, description=r"Bitrate: (.+) kbit/s \(without overhead\)")
    overhead: Annotated[float, FieldKind.FLOAT32] = Field(0.0, description=r"Overhead: (.+)% \(container\+metadata\)")


# Compiled once, reused for every report
OPUSENC = compile_shape(OpusencReport)

SAMPLE_OUTPUT = """
Encoding complete
-----------------------------------------------------
       Encoded: 4 minutes and 31.64 seconds
       Runtime: 4 seconds
                (67.91x realtime)
         Wrote: 3853633 bytes, 13582 packets, 275 pages
       Bitrate: 109.64 kbit/s (without overhead)
 Instant rates: 1.2 to 193.2 kbit/s
                (3 to 483 bytes per packet)
      Overhead: 3.39% (container+metadata)
"""


def test_unmarshal_with_sample_text():
    """Scrape the sample opusenc output into a report."""

    print("🧪 Testing matcher with sample text")
    print("=" * 40)
    print(f"Composite expression: {OPUSENC.expression}")

    report = OpusencReport()
    OPUSENC.unmarshal(SAMPLE_OUTPUT, report)

    print(f"  Encoded:  {report.encoded}")
    print(f"  Runtime:  {report.runtime}")
    print(f"  Realtime: {report.realtime_mult}x")
    print(f"  Wrote:    {report.wrote_bytes} bytes")
    print(f"  Bitrate:  {report.bitrate} kbit/s")
    print(f"  Overhead: {report.overhead}%")

    print("\n✅ Unmarshal test completed!")
    return report


def test_error_handling():
    """Show compile-time and match-time errors."""

    print("\n🔍 Testing error handling")
    print("=" * 40)

    class Broken(BaseModel):
        nested: OpusencReport = Field(default_factory=OpusencReport, description="(.+)")

    try:
        compile_shape(Broken)
        print("❌ This should not have compiled!")
    except CompileError as e:
        print(f"✅ Compile error caught: {e}")

    try:
        OPUSENC.unmarshal("nothing useful here", OpusencReport())
        print("❌ This should not have matched!")
    except MatchError as e:
        print(f"✅ Match error caught: {e}")

    print("\n✅ Error handling test completed!")


def test_dense_single_line():
    """A tight delimiter for single-line input."""

    print("\n📏 Testing a single-line shape")
    print("=" * 40)

    class Row(BaseModel):
        ok: bool = Field(False, description=r"(\S+)")
        count: int = Field(0, description=r"(\S+)")
        ratio: float = Field(0.0, description=r"(\S+)")
        label: str = Field("", description=r"(\S+)$")

    matcher = compile_with_delimiter(Row, " ?")
    row = matcher.parse("true 42 0.5 done")
    print(f"  {row}")

    print("\n✅ Single-line test completed!")


def test_csv_export():
    """Scrape several outputs and export them to CSV."""

    print("\n💾 Testing CSV export")
    print("=" * 40)

    outputs = [SAMPLE_OUTPUT, SAMPLE_OUTPUT.replace("3853633", "1200"), "garbage"]

    exporter = RecordTableExporter()
    records, errors = exporter.scrape(OPUSENC, outputs)
    csv_path = exporter.export_csv(records)

    print(f"  Records: {len(records)}, failures: {len(errors)}")
    print(f"  CSV written to: {csv_path}")

    print("\n✅ CSV export test completed!")


def main():
    """Run all examples."""

    logging.basicConfig(level=config.LOG_LEVEL)

    print("🚀 shapematch examples")
    print("=" * 50)

    test_unmarshal_with_sample_text()
    test_error_handling()
    test_dense_single_line()
    test_csv_export()

    print("\n🎉 All examples completed!")


if __name__ == "__main__":
    main()
