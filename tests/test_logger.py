from data.logger import JsonlLogger


class TestJsonlLogger:
    def test_appends_records(self, tmp_path):
        logger = JsonlLogger(str(tmp_path / "out" / "results.jsonl"))
        logger.write({"score": 700, "testName": "Reaction Time Test"})
        logger.write({"score": 900, "testName": "Stroop Test"})
        assert [r["score"] for r in logger.read_all()] == [700, 900]

    def test_skips_malformed_lines(self, tmp_path):
        path = tmp_path / "results.jsonl"
        path.write_text('{"score": 1}\nnot json\n\n{"score": 2}\n', encoding="utf-8")
        assert JsonlLogger(str(path)).read_all() == [{"score": 1}, {"score": 2}]

    def test_missing_file_reads_empty(self, tmp_path):
        assert JsonlLogger(str(tmp_path / "none.jsonl")).read_all() == []

    def test_latest_record(self, tmp_path):
        logger = JsonlLogger(str(tmp_path / "results.jsonl"))
        assert logger.latest() is None
        logger.write({"score": 400})
        logger.write({"score": 650})
        assert logger.latest() == {"score": 650}
