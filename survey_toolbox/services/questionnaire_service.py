"""
Questionnaire Service Module
---------------------------
Runs the preprocessing stages on questionnaire tables in a fixed order:
projection, exclusion, renaming, subscale aggregation.
Config-driven; a stage runs only when its config key is present.
"""
import os
import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from ..config import DEFAULT_CONFIG
from ..preprocessors.questionnaire_preprocessor import QuestionnairePreprocessor, make_rename_rule
from ..processors.questionnaire_scale_processor import GroupSpec, QuestionnaireScaleProcessor
from ..readers.csv_reader import CSVReader
from ..reporters.csv_reporter import CSVReporter
from ..utils.logging_utils import log_progress_bar


class QuestionnaireService:
    """
    Orchestrates questionnaire preprocessing from a config dict.

    Recognized config keys:
        'id_field' (str): participant id column.
        'fields' (List[str]): columns to keep (projection).
        'exclude_ids' (List[int]): participants to drop.
        'exclude_incomplete' (bool): also drop participants with missing data in the kept items.
        'rename' (dict): {'lowercase': bool, 'prefix_substitutions': {old: new}}.
        'groups' (dict): subscale name -> item list, or -> {'items', 'item_template', 'reverse_items'}.
        'scale_min', 'scale_max' (int): Likert range for reverse keyed items.
        'on_missing' (str): 'propagate' or 'raise'.
        'delimiter' (str), 'output_suffix' (str): file handling.
    """
    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.reader = CSVReader(logger)
        self.reporter = CSVReporter(logger)
        self.logger.info("QuestionnaireService initialized.")

    @staticmethod
    def _with_defaults(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        merged = dict(DEFAULT_CONFIG)
        merged.update(config or {})
        return merged

    def process_questionnaire(self, data: pd.DataFrame, config: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
        """
        Applies the configured stages to `data` and returns the scored table.
        Errors from any stage propagate to the caller unchanged.
        """
        config = self._with_defaults(config)
        id_field = config['id_field']
        preprocessor = QuestionnairePreprocessor(self.logger, id_field=id_field)
        table = data

        if 'fields' in config:
            fields = list(config['fields'])
            if id_field not in fields:
                fields.insert(0, id_field)
            table = preprocessor.project(table, fields)

        exclusion_set = set(config.get('exclude_ids', []))
        if config.get('exclude_incomplete'):
            exclusion_set |= preprocessor.find_incomplete_ids(table)
        if 'exclude_ids' in config or config.get('exclude_incomplete'):
            table = preprocessor.exclude(table, exclusion_set)

        if 'rename' in config:
            rename_cfg = config['rename']
            rule = make_rename_rule(lowercase=rename_cfg.get('lowercase', True),
                                    prefix_substitutions=rename_cfg.get('prefix_substitutions'),
                                    keep=[id_field])
            table = preprocessor.rename(table, rule)

        if 'groups' in config:
            groups = [GroupSpec.from_config(name, spec) for name, spec in config['groups'].items()]
            scale_processor = QuestionnaireScaleProcessor(self.logger, id_field=id_field)
            table = scale_processor.aggregate(table, groups,
                                              on_missing=config['on_missing'],
                                              scale_min=config.get('scale_min'),
                                              scale_max=config.get('scale_max'))

        self.logger.info(f"QuestionnaireService: Processing complete, output shape: {table.shape}")
        return table

    def process_file(self, input_path: str, output_dir: str, config: Optional[Dict[str, Any]] = None) -> str:
        """Reads `input_path`, processes it and writes '<name><output_suffix>.csv' into `output_dir`."""
        config = self._with_defaults(config)
        data = self.reader.load_table(input_path, id_field=config['id_field'], delimiter=config['delimiter'])
        scored = self.process_questionnaire(data, config)
        base = os.path.splitext(os.path.basename(input_path))[0]
        return self.reporter.save_dataframe(scored, output_dir, f"{base}{config['output_suffix']}.csv",
                                            delimiter=config['delimiter'])

    def process_files(self, input_paths: List[str], output_dir: str, config: Optional[Dict[str, Any]] = None) -> List[str]:
        """Processes every file in `input_paths` with the same config. Stops at the first failure."""
        outputs = []
        update, close = log_progress_bar(self.logger, len(input_paths), desc="Questionnaires")
        try:
            for path in input_paths:
                outputs.append(self.process_file(path, output_dir, config))
                update()
        finally:
            close()
        self.logger.info(f"QuestionnaireService: Processed {len(outputs)} file(s) into {output_dir}")
        return outputs
