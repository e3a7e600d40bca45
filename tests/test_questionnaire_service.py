import json
import os

import numpy as np
import pandas as pd
import pytest

from survey_toolbox.config import DEFAULT_CONFIG, load_config
from survey_toolbox.errors import DuplicateFieldNameError, MissingValueInAggregateError, UnknownFieldError
from survey_toolbox.readers.csv_reader import CSVReader
from survey_toolbox.reporters.csv_reporter import CSVReporter
from survey_toolbox.services.questionnaire_service import QuestionnaireService

from conftest import DEPRESSION_ITEMS

RAW_CSV = (
    "participant_id,Timestamp,Q3,Q5,Q10,Q13,Q16,Q17,Q21\n"
    "35,2023-01-01,0,1,2,0,1,3,0\n"
    "108,2023-01-02,0,1,2,0,1,3,0\n"
    "109,2023-01-03,3,3,,3,3,3,3\n"
)


@pytest.fixture
def raw_csv(tmp_path):
    path = tmp_path / "dass_raw.csv"
    path.write_text(RAW_CSV)
    return str(path)


@pytest.fixture
def pipeline_config():
    return {
        'fields': [f"Q{i}" for i in DEPRESSION_ITEMS],
        'exclude_ids': [35],
        'rename': {'lowercase': True, 'prefix_substitutions': {'q': 'dass_'}},
        'groups': {'depression': {'items': DEPRESSION_ITEMS, 'item_template': 'dass_{}'}},
    }


def test_reader_preserves_field_order(logger, raw_csv):
    table = CSVReader(logger).load_table(raw_csv, id_field='participant_id')
    assert table.columns.tolist()[:3] == ['participant_id', 'Timestamp', 'Q3']
    assert table['participant_id'].tolist() == [35, 108, 109]
    assert np.isnan(table.loc[2, 'Q10'])


def test_reader_rejects_missing_or_duplicate_ids(logger, tmp_path):
    reader = CSVReader(logger)
    path = tmp_path / "dupes.csv"
    path.write_text("participant_id,Q1\n1,0\n1,2\n")
    with pytest.raises(ValueError):
        reader.load_table(str(path), id_field='participant_id')
    with pytest.raises(UnknownFieldError):
        reader.load_table(str(path), id_field='subject')
    with pytest.raises(FileNotFoundError):
        reader.load_table(str(tmp_path / "absent.csv"))


def test_reader_rejects_non_integer_ids(logger, tmp_path):
    path = tmp_path / "ids.csv"
    path.write_text("participant_id,Q1\nP01,0\n")
    with pytest.raises(ValueError):
        CSVReader(logger).load_table(str(path), id_field='participant_id')


def test_reader_semicolon_delimiter(logger, tmp_path):
    path = tmp_path / "semi.csv"
    path.write_text("participant_id;Q1\n7;2\n")
    table = CSVReader(logger).load_table(str(path), id_field='participant_id', delimiter=';')
    assert table.columns.tolist() == ['participant_id', 'Q1']


def test_reporter_writes_without_index(logger, tmp_path):
    df = pd.DataFrame({'participant_id': [1, 2], 'depression': [7.0, np.nan]})
    path = CSVReporter(logger).save_dataframe(df, str(tmp_path / "out"), "scores.csv")
    assert os.path.exists(path)
    assert open(path).read().splitlines() == ['participant_id,depression', '1,7.0', '2,']


def test_process_questionnaire_runs_all_stages(logger, dass_table, pipeline_config):
    result = QuestionnaireService(logger).process_questionnaire(dass_table, pipeline_config)
    assert result.columns.tolist() == ['participant_id'] + [f"dass_{i}" for i in DEPRESSION_ITEMS] + ['depression']
    assert result['participant_id'].tolist() == [108, 109]
    assert result['depression'].tolist() == [7, 21]


def test_process_questionnaire_without_stages_returns_input(logger, dass_table):
    result = QuestionnaireService(logger).process_questionnaire(dass_table, {})
    pd.testing.assert_frame_equal(result, dass_table)


def test_process_questionnaire_excludes_incomplete(logger, raw_csv, pipeline_config):
    service = QuestionnaireService(logger)
    data = service.reader.load_table(raw_csv, id_field='participant_id')
    config = dict(pipeline_config, exclude_ids=[], exclude_incomplete=True)
    result = service.process_questionnaire(data, config)
    assert result['participant_id'].tolist() == [35, 108]
    assert result.attrs['incomplete_scores'] == {}


def test_process_questionnaire_raise_policy(logger, raw_csv, pipeline_config):
    service = QuestionnaireService(logger)
    data = service.reader.load_table(raw_csv, id_field='participant_id')
    with pytest.raises(MissingValueInAggregateError) as excinfo:
        service.process_questionnaire(data, dict(pipeline_config, on_missing='raise'))
    assert excinfo.value.incomplete == {'depression': [109]}


def test_process_file_writes_scored_csv(logger, raw_csv, tmp_path, pipeline_config):
    out_dir = tmp_path / "derivatives"
    path = QuestionnaireService(logger).process_file(raw_csv, str(out_dir), pipeline_config)
    assert os.path.basename(path) == "dass_raw_scored.csv"
    written = pd.read_csv(path)
    assert written['participant_id'].tolist() == [108, 109]
    assert written['depression'].tolist()[0] == 7
    assert np.isnan(written['depression'].iloc[1])


def test_process_files_batch(logger, tmp_path, pipeline_config):
    paths = []
    for name in ("site_a", "site_b"):
        path = tmp_path / f"{name}.csv"
        path.write_text(RAW_CSV)
        paths.append(str(path))
    outputs = QuestionnaireService(logger).process_files(paths, str(tmp_path / "out"), pipeline_config)
    assert [os.path.basename(p) for p in outputs] == ["site_a_scored.csv", "site_b_scored.csv"]


def test_load_config_overlays_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({'exclude_ids': [35], 'on_missing': 'raise'}))
    config = load_config(str(path), overrides={'delimiter': ';'})
    assert config['exclude_ids'] == [35]
    assert config['on_missing'] == 'raise'
    assert config['delimiter'] == ';'
    assert config['id_field'] == DEFAULT_CONFIG['id_field']
    assert DEFAULT_CONFIG['on_missing'] == 'propagate'


def test_load_config_rejects_non_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_reader_rejects_repeated_headers(logger, tmp_path):
    path = tmp_path / "repeated.csv"
    path.write_text("participant_id,Q1,Q1\n1,0,2\n")
    with pytest.raises(DuplicateFieldNameError) as excinfo:
        CSVReader(logger).load_table(str(path), id_field='participant_id')
    assert excinfo.value.duplicates == ['Q1']
