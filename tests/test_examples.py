from pathlib import Path

from click.testing import CliRunner

from pgenchunk.__main__ import main


DATADIR = Path(__file__).parent.joinpath("data")
SIMPLE_PGEN = str(DATADIR.joinpath("simple.pgen"))


def _invoke(*args):
    """
    Run the CLI quietly, so that only the command's own output is captured
    """
    runner = CliRunner()
    return runner.invoke(main, list(args) + ["-v", "CRITICAL"], catch_exceptions=False)


def test_info():
    result = _invoke("info", SIMPLE_PGEN)
    assert result.exit_code == 0
    assert result.output == "Variant count\t4\nSample count\t2\nFile size\t19\n"


def test_info_mismatched_records(tmp_path):
    pgen = tmp_path.joinpath("simple.pgen")
    pgen.write_bytes(DATADIR.joinpath("simple.pgen").read_bytes())
    # drop the last variant from the .pvar
    pvar = DATADIR.joinpath("simple.pvar").read_text().splitlines(keepends=True)
    tmp_path.joinpath("simple.pvar").write_text("".join(pvar[:-1]))
    tmp_path.joinpath("simple.psam").write_text(
        DATADIR.joinpath("simple.psam").read_text()
    )

    # a mismatch is only worth a warning
    result = _invoke("info", str(pgen))
    assert result.exit_code == 0
    assert "Variant count\t4" in result.output

    # but reading past the end of the .pvar is an error
    result = _invoke("ids", str(pgen), "variants")
    assert result.exit_code == 1
    assert "ended after 3" in result.output


def test_tile():
    expected = (
        "sample\trs1\trs2\trs3\trs4\n"
        "HG00096\t0\t2\t1\t.\n"
        "HG00097\t1\t.\t1\t0\n"
    )
    result = _invoke("tile", SIMPLE_PGEN)
    assert result.exit_code == 0
    assert result.output == expected

    # the full range can also be given explicitly
    result = _invoke("tile", "-V", "0:4", "-S", "0:2", SIMPLE_PGEN)
    assert result.exit_code == 0
    assert result.output == expected


def test_tile_subset(tmp_path):
    output = tmp_path.joinpath("tile.tsv")
    result = _invoke(
        "tile",
        "--variants",
        ":2",
        "--samples",
        "1:",
        "-o",
        str(output),
        SIMPLE_PGEN,
    )
    assert result.exit_code == 0
    assert result.output == ""
    # cell 1 is at byte 11, so the tile holds bytes [0, 1]
    assert output.read_text() == "sample\trs1\trs2\nHG00097\t0\t1\n"


def test_tile_out_of_bounds():
    result = _invoke("tile", "-V", "0:5", SIMPLE_PGEN)
    assert result.exit_code == 1
    assert "out of range" in result.output

    result = _invoke("tile", "-S", "2:1", SIMPLE_PGEN)
    assert result.exit_code == 1


def test_tile_bad_range():
    for bad_range in ("abc", "1-2", "3", "a:b"):
        result = _invoke("tile", "-V", bad_range, SIMPLE_PGEN)
        assert result.exit_code == 2
        assert "START:END" in result.output


def test_walk():
    result = _invoke("walk", SIMPLE_PGEN)
    assert result.exit_code == 0
    assert result.output == "Tiles\t1\nGenotypes\t8\nMissing\t2\n"

    # small tiles are each read from one contiguous run of bytes starting at
    # 11 + cell // 4, so they never reach the missing genotypes at bytes 3 and 6
    result = _invoke(
        "walk",
        "--variant-chunk",
        "2",
        "--sample-chunk",
        "1",
        SIMPLE_PGEN,
    )
    assert result.exit_code == 0
    assert result.output == "Tiles\t4\nGenotypes\t8\nMissing\t0\n"

    result = _invoke("walk", "--variant-chunk", "0", SIMPLE_PGEN)
    assert result.exit_code == 2


def test_ids():
    result = _invoke("ids", "-r", "1:3", SIMPLE_PGEN, "variants")
    assert result.exit_code == 0
    assert result.output == "rs2\nrs3\n"

    result = _invoke("ids", SIMPLE_PGEN, "samples")
    assert result.exit_code == 0
    assert result.output == "HG00096\nHG00097\n"

    result = _invoke("ids", "-r", "0:3", SIMPLE_PGEN, "samples")
    assert result.exit_code == 1


def test_bad_magic(tmp_path):
    for suffix in (".pvar", ".psam"):
        tmp_path.joinpath("simple" + suffix).write_text(
            DATADIR.joinpath("simple" + suffix).read_text()
        )
    pgen = tmp_path.joinpath("simple.pgen")
    pgen.write_bytes(b"\x00\x00" + DATADIR.joinpath("simple.pgen").read_bytes()[2:])

    result = _invoke("info", str(pgen))
    assert result.exit_code == 1
    assert "Invalid PGEN file format" in result.output

    # and an unsupported storage mode
    pgen.write_bytes(b"\x6c\x1b\x01" + DATADIR.joinpath("simple.pgen").read_bytes()[3:])
    result = _invoke("tile", str(pgen))
    assert result.exit_code == 1
    assert "Unsupported storage mode" in result.output
