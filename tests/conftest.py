import logging

import pandas as pd
import pytest

DEPRESSION_ITEMS = [3, 5, 10, 13, 16, 17, 21]
ANXIETY_ITEMS = [2, 4, 7, 9, 15, 19, 20]
STRESS_ITEMS = [1, 6, 8, 11, 12, 14, 18]


@pytest.fixture
def logger():
    return logging.getLogger("survey_toolbox_tests")


@pytest.fixture
def dass_table():
    """Three DASS-21 style participants, items Q1..Q21 on a 0-3 scale."""
    rows = {
        35: [1, 2, 0, 1, 1, 2, 0, 1, 3, 2, 1, 0, 0, 2, 1, 1, 3, 2, 0, 1, 0],
        108: [0, 1, 0, 2, 1, 3, 1, 0, 2, 2, 1, 1, 0, 2, 3, 1, 3, 0, 1, 2, 0],
        109: [3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3],
    }
    records = []
    for pid, answers in rows.items():
        record = {'participant_id': pid}
        record.update({f"Q{i}": value for i, value in enumerate(answers, start=1)})
        records.append(record)
    return pd.DataFrame(records)
