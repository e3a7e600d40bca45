"""
Questionnaire Scale Processor Module
-----------------------------------
Sums groups of Likert items into subscale scores.
A missing or unparseable item makes that participant's subscale score missing;
it is never counted as zero.
"""
import pandas as pd
import numpy as np
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..errors import DuplicateFieldNameError, MissingValueInAggregateError, UnknownFieldError

ItemRef = Union[int, str]

ON_MISSING_OPTIONS = ('propagate', 'raise')


@dataclass(frozen=True)
class GroupSpec:
    """
    A named subscale and the items summed into it.

    Integer items are item numbers and resolve through `item_template`
    (e.g. 3 with 'dass_{}' -> 'dass_3'); string items are literal field names.
    `reverse_items` uses the same references and must be a subset of `items`.
    """
    name: str
    items: Tuple[ItemRef, ...]
    item_template: str = "{}"
    reverse_items: Tuple[ItemRef, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # accept lists from JSON configs
        object.__setattr__(self, 'items', tuple(self.items))
        object.__setattr__(self, 'reverse_items', tuple(self.reverse_items))
        if not self.items:
            raise ValueError(f"GroupSpec '{self.name}' has no items.")
        stray = [i for i in self.reverse_items if i not in self.items]
        if stray:
            raise ValueError(f"GroupSpec '{self.name}': reverse items {stray} are not part of the group.")
        fields = self.fields
        repeated = sorted({f for f in fields if fields.count(f) > 1})
        if repeated:
            raise DuplicateFieldNameError(repeated)

    def resolve(self, item: ItemRef) -> str:
        if isinstance(item, str):
            return item
        return self.item_template.format(item)

    @property
    def fields(self) -> List[str]:
        return [self.resolve(i) for i in self.items]

    @property
    def reverse_fields(self) -> List[str]:
        return [self.resolve(i) for i in self.reverse_items]

    @classmethod
    def from_config(cls, name: str, spec: Union[Sequence[ItemRef], Dict[str, Any]]) -> 'GroupSpec':
        """Builds a GroupSpec from a config entry: either a plain item list or a dict of GroupSpec fields."""
        if isinstance(spec, dict):
            return cls(name=name,
                       items=spec['items'],
                       item_template=spec.get('item_template', "{}"),
                       reverse_items=spec.get('reverse_items', ()))
        return cls(name=name, items=tuple(spec))


def reverse_score(series: pd.Series, scale_min: int, scale_max: int) -> pd.Series:
    """
    Reverse keying for a numeric Likert series: new = (scale_min + scale_max) - old.
    Missing values stay missing.
    """
    return (scale_min + scale_max) - series


class QuestionnaireScaleProcessor:
    """
    Computes subscale scores from wide-format questionnaire data.
    - One new column per GroupSpec, appended after the existing columns.
    - Missing item data is reported through the result (or raised), not masked.
    """
    def __init__(self, logger: logging.Logger, id_field: Optional[str] = 'participant_id'):
        self.logger = logger
        self.id_field = id_field
        self.logger.info("QuestionnaireScaleProcessor initialized.")

    def _row_ids(self, table: pd.DataFrame, mask: pd.Series) -> List[Any]:
        if self.id_field and self.id_field in table.columns:
            ids = table.loc[mask, self.id_field].tolist()
        else:
            ids = table.index[mask.to_numpy()].tolist()
        return sorted(ids, key=lambda v: (str(type(v)), v))

    def reverse_items(self, table: pd.DataFrame, fields: List[str], scale_min: int, scale_max: int) -> pd.DataFrame:
        """Returns a copy of `table` with `fields` reverse keyed on the [scale_min, scale_max] scale."""
        missing = [f for f in fields if f not in table.columns]
        if missing:
            self.logger.error(f"QuestionnaireScaleProcessor: Cannot reverse unknown field(s) {missing}.")
            raise UnknownFieldError(missing)
        if scale_min >= scale_max:
            self.logger.error(f"QuestionnaireScaleProcessor: Invalid scale range [{scale_min}, {scale_max}].")
            raise ValueError(f"scale_min ({scale_min}) must be smaller than scale_max ({scale_max}).")
        out = table.copy()
        for col in fields:
            values = pd.to_numeric(out[col], errors='coerce')
            out_of_range = values.notna() & ((values < scale_min) | (values > scale_max))
            if out_of_range.any():
                self.logger.warning(f"QuestionnaireScaleProcessor: {int(out_of_range.sum())} value(s) of '{col}' outside [{scale_min}, {scale_max}].")
            out[col] = reverse_score(values, scale_min, scale_max)
        self.logger.info(f"QuestionnaireScaleProcessor: Reverse keyed {len(fields)} item(s).")
        return out

    def aggregate(self, table: pd.DataFrame, groups: Sequence[GroupSpec], on_missing: str = 'propagate',
                  scale_min: Optional[int] = None, scale_max: Optional[int] = None) -> pd.DataFrame:
        """
        Appends one column per group holding the row-wise sum of the group's items.

        Args:
            table (pd.DataFrame): Wide-format item responses.
            groups (Sequence[GroupSpec]): Subscales to compute, in output column order.
            on_missing (str): 'propagate' leaves NaN in the affected rows, logs a warning and
                              records them in result.attrs['incomplete_scores'];
                              'raise' raises MissingValueInAggregateError instead.
            scale_min, scale_max (int, optional): Likert range, required when a group has reverse_items.

        Returns:
            pd.DataFrame: copy of `table` with the subscale columns appended.

        Raises:
            UnknownFieldError: a group references a field that does not exist.
            DuplicateFieldNameError: a group name collides with an existing field or another group.
            MissingValueInAggregateError: on_missing='raise' and some score could not be computed.
        """
        if on_missing not in ON_MISSING_OPTIONS:
            self.logger.error(f"QuestionnaireScaleProcessor: Unknown on_missing policy '{on_missing}'.")
            raise ValueError(f"on_missing must be one of {ON_MISSING_OPTIONS}, got '{on_missing}'.")

        names = [g.name for g in groups]
        clashes = [n for n in names if n in table.columns or names.count(n) > 1]
        if clashes:
            self.logger.error(f"QuestionnaireScaleProcessor: Subscale name(s) already in use: {sorted(set(clashes))}")
            raise DuplicateFieldNameError(clashes)

        unknown = [f for g in groups for f in g.fields if f not in table.columns]
        if unknown:
            self.logger.error(f"QuestionnaireScaleProcessor: Unknown item field(s) {unknown}. Columns available: {table.columns.tolist()}")
            raise UnknownFieldError(list(dict.fromkeys(unknown)))

        result = table.copy()
        incomplete: Dict[str, List[Any]] = {}
        for group in groups:
            raw = table[group.fields]
            items = raw.apply(pd.to_numeric, errors='coerce')
            unparseable = items.isna() & raw.notna()
            if unparseable.to_numpy().any():
                self.logger.warning(f"QuestionnaireScaleProcessor: '{group.name}': {int(unparseable.to_numpy().sum())} unparseable value(s) treated as missing.")
            if group.reverse_items:
                if scale_min is None or scale_max is None:
                    self.logger.error(f"QuestionnaireScaleProcessor: '{group.name}' has reverse items but no scale range was given.")
                    raise ValueError(f"Group '{group.name}' has reverse items; scale_min and scale_max are required.")
                items = self.reverse_items(items, group.reverse_fields, scale_min, scale_max)

            # skipna=False: one missing item makes the whole score missing
            scores = items.sum(axis=1, skipna=False).astype(np.float64)
            result[group.name] = scores
            missing_mask = scores.isna()
            if missing_mask.any():
                incomplete[group.name] = self._row_ids(table, missing_mask)
                self.logger.warning(f"QuestionnaireScaleProcessor: '{group.name}' is missing for {int(missing_mask.sum())} participant(s): {incomplete[group.name]}")
            else:
                self.logger.info(f"QuestionnaireScaleProcessor: Computed '{group.name}' from {len(group.fields)} item(s).")

        if incomplete and on_missing == 'raise':
            self.logger.error(f"QuestionnaireScaleProcessor: Aborting, missing values in subscale(s) {list(incomplete)}.")
            raise MissingValueInAggregateError(incomplete)

        # keep reports from earlier aggregate calls on the same table
        result.attrs['incomplete_scores'] = {**table.attrs.get('incomplete_scores', {}), **incomplete}
        return result
