"""
Questionnaire Preprocessor Module
--------------------------------
Table-level preprocessing for wide-format questionnaire data:
column projection, participant exclusion, and column renaming.
Every operation returns a new DataFrame and leaves its input untouched.
"""
import pandas as pd
import logging
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from ..errors import DuplicateFieldNameError, UnknownFieldError

RenameRule = Union[Callable[[str], str], Mapping[str, str]]


def normalize_field_name(name: str, lowercase: bool = True,
                         prefix_substitutions: Optional[Mapping[str, str]] = None) -> str:
    """
    Lowercases a field name and swaps a known prefix, e.g. 'Q3' -> 'dass_3'
    with prefix_substitutions={'q': 'dass_'}. Prefixes are matched after lowercasing and
    only when the rest of the name is an item number, so 'quality' stays 'quality'.
    The first matching prefix wins.
    """
    new_name = str(name).strip()
    if lowercase:
        new_name = new_name.lower()
    for old_prefix, new_prefix in (prefix_substitutions or {}).items():
        if new_name.startswith(old_prefix) and new_name[len(old_prefix):].isdigit():
            return new_prefix + new_name[len(old_prefix):]
    return new_name


def make_rename_rule(lowercase: bool = True,
                     prefix_substitutions: Optional[Mapping[str, str]] = None,
                     keep: Iterable[str] = ()) -> Callable[[str], str]:
    """Builds a rename rule from normalize_field_name. Names in `keep` pass through unchanged."""
    keep_set = set(keep)

    def rule(name: str) -> str:
        if name in keep_set:
            return name
        return normalize_field_name(name, lowercase=lowercase, prefix_substitutions=prefix_substitutions)
    return rule


class QuestionnairePreprocessor:
    """
    Projects, filters and renames questionnaire tables.
    - One row per participant, identified by `id_field`.
    - Unknown fields and name collisions are raised, never silently skipped.
    """
    def __init__(self, logger: logging.Logger, id_field: str = 'participant_id'):
        self.logger = logger
        self.id_field = id_field
        self.logger.info("QuestionnairePreprocessor initialized.")

    def _require_fields(self, table: pd.DataFrame, fields: Iterable[str]) -> None:
        missing = [f for f in fields if f not in table.columns]
        if missing:
            self.logger.error(f"QuestionnairePreprocessor: Unknown field(s) {missing}. Columns available: {table.columns.tolist()}")
            raise UnknownFieldError(missing)

    def project(self, table: pd.DataFrame, fields: List[str]) -> pd.DataFrame:
        """
        Keeps only `fields`, in the order given. Row order and count are preserved.

        Raises:
            UnknownFieldError: if any requested field is not a column of `table`.
        """
        fields = list(fields)
        self._require_fields(table, fields)
        duplicates = [f for f in fields if fields.count(f) > 1]
        if duplicates:
            self.logger.error(f"QuestionnairePreprocessor: Field(s) requested more than once: {sorted(set(duplicates))}")
            raise DuplicateFieldNameError(duplicates)
        projected = table.loc[:, fields].copy()
        self.logger.info(f"QuestionnairePreprocessor: Projected {table.shape[1]} -> {projected.shape[1]} columns.")
        return projected

    def exclude(self, table: pd.DataFrame, ids: Iterable[Any], id_field: Optional[str] = None) -> pd.DataFrame:
        """
        Drops rows whose participant id is in `ids`. Ids that match no row are ignored.
        Remaining rows keep their order and values.
        """
        id_field = id_field or self.id_field
        self._require_fields(table, [id_field])
        exclusion_set = set(ids)
        mask = table[id_field].isin(exclusion_set)
        not_found = exclusion_set - set(table.loc[mask, id_field])
        if not_found:
            self.logger.info(f"QuestionnairePreprocessor: Ids not present, nothing to exclude for: {sorted(not_found, key=str)}")
        kept = table.loc[~mask].copy()
        self.logger.info(f"QuestionnairePreprocessor: Excluded {int(mask.sum())} participant(s); {len(kept)} remain.")
        return kept

    def rename(self, table: pd.DataFrame, rule: RenameRule) -> pd.DataFrame:
        """
        Applies `rule` to every field name. `rule` is either a callable str -> str
        or a mapping of old -> new names (unmapped fields keep their name).

        Raises:
            UnknownFieldError: if a mapping names a field that does not exist.
            DuplicateFieldNameError: if two fields end up with the same name.
        """
        if isinstance(rule, Mapping):
            self._require_fields(table, rule.keys())
            mapping = dict(rule)
            transform = lambda name: mapping.get(name, name)
        else:
            transform = rule

        new_names = [transform(str(col)) for col in table.columns]
        duplicates = [name for name, count in Counter(new_names).items() if count > 1]
        if duplicates:
            self.logger.error(f"QuestionnairePreprocessor: Rename produced duplicate field names: {sorted(set(duplicates))}")
            raise DuplicateFieldNameError(duplicates)

        renamed = table.copy()
        renamed.columns = new_names
        if self.id_field in table.columns and transform(self.id_field) != self.id_field:
            self.logger.warning(f"QuestionnairePreprocessor: Id field '{self.id_field}' renamed to '{transform(self.id_field)}'.")
        self.logger.info(f"QuestionnairePreprocessor: Renamed {sum(a != b for a, b in zip(table.columns, new_names))} field(s).")
        return renamed

    def find_incomplete_ids(self, table: pd.DataFrame, fields: Optional[List[str]] = None,
                            id_field: Optional[str] = None) -> Set[Any]:
        """
        Returns the ids of participants with at least one missing value in `fields`
        (all non-id fields when omitted). Empty strings count as missing.
        """
        id_field = id_field or self.id_field
        self._require_fields(table, [id_field])
        if fields is None:
            fields = [c for c in table.columns if c != id_field]
        self._require_fields(table, fields)
        values = table[fields].replace(r'^\s*$', pd.NA, regex=True)
        incomplete = set(table.loc[values.isna().any(axis=1), id_field].tolist())
        self.logger.info(f"QuestionnairePreprocessor: {len(incomplete)} participant(s) with missing data in {len(fields)} field(s).")
        return incomplete

    def extract_items(self, input_df: pd.DataFrame, config: Dict[str, Any]) -> pd.DataFrame:
        """
        Selects the participant id column and the questionnaire items and gives them standard names.

        Args:
            input_df (pd.DataFrame): Raw questionnaire export.
            config (Dict[str, Any]): Expected keys:
                'participant_id_column_original' (str): Name of the PID column in the source file.
                'item_column_map' (Dict[str, str]): Maps original item column names to standard names,
                                                    e.g. {"Q1_raw": "item_1"}. Defines which columns are items.
                'output_participant_id_col_name' (str, optional): Default: this preprocessor's id_field.

        Returns:
            pd.DataFrame: id column followed by the item columns, items coerced to numeric
                          (unparseable answers become NaN).
        """
        required_keys = ['participant_id_column_original', 'item_column_map']
        for key in required_keys:
            if key not in config:
                self.logger.error(f"QuestionnairePreprocessor - Missing required key in config: '{key}'")
                raise KeyError(key)
        if not config['item_column_map']:
            self.logger.error("QuestionnairePreprocessor - 'item_column_map' cannot be empty.")
            raise ValueError("'item_column_map' cannot be empty.")

        pid_col_original = config['participant_id_column_original']
        item_map = config['item_column_map']
        output_pid_name = config.get('output_participant_id_col_name', self.id_field)

        processed_df = self.project(input_df, [pid_col_original] + list(item_map.keys()))
        processed_df = self.rename(processed_df, {pid_col_original: output_pid_name, **item_map})
        for item_col in item_map.values():
            processed_df[item_col] = pd.to_numeric(processed_df[item_col], errors='coerce')

        self.logger.info(f"QuestionnairePreprocessor - Extracted questionnaire items. Final shape: {processed_df.shape}")
        return processed_df
