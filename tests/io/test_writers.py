from io import BytesIO
import json
import zipfile
import pandas as pd

from dataclean.dataset import Dataset
from dataclean.io.writers import (
    BUNDLE_NAMES,
    export_bundle,
    quality_report,
    to_csv_bytes,
    to_json_bytes,
    to_xlsx_bytes,
)
from dataclean.profiling.metrics import profile_dataset

def _ds():
    return Dataset.from_records([
        {"name": "Élodie", "amount": 10},
        {"name": "Marc", "amount": None},
    ])

def test_csv_bytes_utf8_and_blank():
    text = to_csv_bytes(_ds()).decode("utf-8")
    assert text.splitlines() == ["name,amount", "Élodie,10", "Marc,"]

def test_xlsx_bytes_sheet_clean():
    raw = to_xlsx_bytes(_ds())
    df = pd.read_excel(BytesIO(raw), sheet_name="clean", engine="openpyxl")
    assert list(df.columns) == ["name", "amount"]
    assert df["name"].tolist() == ["Élodie", "Marc"]

def test_json_bytes_rows():
    assert json.loads(to_json_bytes(_ds())) == [
        {"name": "Élodie", "amount": 10},
        {"name": "Marc", "amount": None},
    ]

def test_quality_report_keys():
    ds = _ds()
    rep = quality_report(ds, profile_dataset(ds), log=["x"], generated_at="2024-01-01T00:00:00Z")
    assert rep["rows"] == 2
    assert rep["columns"] == ["name", "amount"]
    assert rep["issues"] == ["amount"]
    assert rep["profiles"][1]["detected_type"] == "number"
    assert rep["log"] == ["x"]
    assert rep["generated_at"].startswith("2024")
    json.dumps(rep)

def test_export_bundle_contents():
    ds = _ds()
    raw = export_bundle(ds, profile_dataset(ds), log=["imputed"])
    with zipfile.ZipFile(BytesIO(raw)) as zf:
        assert tuple(zf.namelist()) == BUNDLE_NAMES
        rep = json.loads(zf.read("quality_report.json"))
        assert rep["log"] == ["imputed"]
        assert zf.read("dataset_clean.csv").decode("utf-8").startswith("name,amount")
