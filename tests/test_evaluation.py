import json

from evaluation.evaluation import main, measure_corpus, parse_pytest_verbose_output, summarize

VERBOSE_OUTPUT = """\
============================= test session starts ==============================
collected 4 items

tests/test_huffman_core.py::test_encode_scenario PASSED                  [ 25%]
tests/test_huffman_core.py::test_decode_empty_bits FAILED                [ 50%]
tests/test_huffman_service.py::test_empty_input SKIPPED (no data)        [ 75%]
tests/test_huffman_service.py::test_pack_bits ERROR                      [100%]

=========================== short test summary info ============================
FAILED tests/test_huffman_core.py::test_decode_empty_bits - assert [] == ['a']
"""


def test_parse_pytest_verbose_output():
    tests = parse_pytest_verbose_output(VERBOSE_OUTPUT)
    assert [t["outcome"] for t in tests] == ["passed", "failed", "skipped", "error"]
    assert tests[0]["nodeid"] == "tests/test_huffman_core.py::test_encode_scenario"
    assert tests[0]["name"] == "test_encode_scenario"
    assert tests[2]["name"] == "test_empty_input"


def test_summarize():
    summary = summarize(parse_pytest_verbose_output(VERBOSE_OUTPUT))
    assert summary == {"total": 4, "passed": 1, "failed": 1, "error": 1, "skipped": 1}


def test_measure_corpus_round_trips():
    metrics = measure_corpus({"text": b"abracadabra", "single": b"zzzz"})
    assert metrics["text"]["round_trip"]
    assert metrics["text"]["alphabet_size"] == 5
    assert metrics["single"]["round_trip"]
    assert metrics["single"]["average_code_length"] == 1.0


def test_measure_default_corpus():
    metrics = measure_corpus()
    assert all(m["round_trip"] for m in metrics.values())
    assert metrics["skewed"]["ratio"] < 1.0


def test_main_writes_report(tmp_path):
    output = tmp_path / "report.json"
    assert main(["--skip-tests", "--output", str(output)]) == 0

    report = json.loads(output.read_text())
    assert report["success"] is True
    assert report["tests"] is None
    assert "english_sample" in report["metrics"]
    assert report["environment"]["python_version"]
