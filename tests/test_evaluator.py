import csv
import json
import os
import tempfile
import unittest
from unittest import mock

import evaluator

ROWS = [
    {"companyName": "Acme Robotics", "revenue": "150 million", "marketSize": "5 billion",
     "traction": "50% monthly growth, 10,000 users", "teamSize": "25 employees", "fundingStage": "Series B"},
    {"id": "deck-2", "kpis": {"company_name": "Tiny Co", "stage": "Pre-seed"}},
]


class TestEvaluatorCLI(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.data = os.path.join(self.tmp.name, "kpis.jsonl")
        self.out = os.path.join(self.tmp.name, "scores.jsonl")
        self.csv = os.path.join(self.tmp.name, "scores.csv")
        with open(self.data, "w", encoding="utf-8") as f:
            for r in ROWS:
                f.write(json.dumps(r) + "\n")
            f.write("\n{not json\n[1, 2]\n")

    def _read_out(self):
        with open(self.out, encoding="utf-8") as f:
            return [json.loads(line) for line in f]

    def test_scores_jsonl_and_csv(self):
        rc = evaluator.main(["--data", self.data, "--out", self.out, "--csv", self.csv])
        self.assertEqual(rc, 0)
        out = self._read_out()
        self.assertEqual(len(out), 2)
        self.assertEqual(out[0]["scores"]["investmentScore"], 88)
        self.assertEqual(out[1]["id"], "deck-2")
        self.assertEqual(out[1]["kpis"], {"companyName": "Tiny Co", "fundingStage": "Pre-seed"})
        self.assertNotIn("breakdown", out[0])

        with open(self.csv, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        self.assertEqual(list(rows[0].keys()), evaluator.CSV_FIELDS)
        self.assertEqual(rows[0]["companyName"], "Acme Robotics")
        self.assertEqual(rows[0]["year3"], "150")
        self.assertEqual(rows[1]["overallRisk"], "High")

    def test_explain(self):
        evaluator.main(["--data", self.data, "--out", self.out, "--explain"])
        b = self._read_out()[0]["breakdown"]
        self.assertEqual(b["growth"]["components"]["fundingStage"], 12)

    def test_verify(self):
        rc = evaluator.main(["--data", self.data, "--out", self.out, "--verify", "--runs", "3"])
        self.assertEqual(rc, 0)
        self.assertTrue(all(r["consistent"] for r in self._read_out()))

    def test_verify_reports_inconsistency(self):
        with mock.patch("evaluator.verify_consistency", return_value={"consistent": False}):
            rc = evaluator.main(["--data", self.data, "--out", self.out, "--verify"])
        self.assertEqual(rc, 1)

    def test_verify_with_too_few_runs(self):
        for runs in ("0", "1"):
            with self.subTest(runs=runs):
                with mock.patch("evaluator.verify_consistency", wraps=evaluator.verify_consistency) as verify:
                    rc = evaluator.main(["--data", self.data, "--out", self.out, "--verify", "--runs", runs])
                self.assertEqual(rc, 0)
                self.assertEqual(verify.call_count, len(ROWS))
                self.assertTrue(all(r["consistent"] for r in self._read_out()))

    def test_csv_marks_missing_company(self):
        with open(self.data, "w", encoding="utf-8") as f:
            f.write(json.dumps({"revenue": "$2 million"}) + "\n")
        evaluator.main(["--data", self.data, "--out", self.out, "--csv", self.csv])
        with open(self.csv, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        self.assertEqual(rows[0]["companyName"], "N/A")


class TestScoreRows(unittest.TestCase):
    def test_non_dict_kpis_field_uses_row(self):
        out = evaluator.score_rows([{"kpis": "text", "fundingStage": "Seed"}])
        self.assertEqual(out[0]["kpis"]["fundingStage"], "Seed")

    def test_verify_flag_always_reports(self):
        out = evaluator.score_rows([{"fundingStage": "Seed"}], verify=True, runs=0)
        self.assertIs(out[0]["consistent"], True)
        self.assertNotIn("consistent", evaluator.score_rows([{"fundingStage": "Seed"}])[0])


if __name__ == "__main__":
    unittest.main()
