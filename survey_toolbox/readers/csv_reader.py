"""
CSV Reader Module
-----------------
Loads delimited survey exports into a DataFrame.
Field names and their order are kept exactly as they appear in the file.
"""
import os
import logging
from typing import Optional

import pandas as pd
from pandas.api.types import is_integer_dtype

from ..errors import DuplicateFieldNameError, UnknownFieldError


class CSVReader:
    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("CSVReader initialized.")

    def load_table(self, path: str, id_field: Optional[str] = None, delimiter: str = ',') -> pd.DataFrame:
        """
        Reads a delimited text file.

        Args:
            path (str): File to read.
            id_field (str, optional): Participant id column. When given it must exist
                                      and hold unique integers.
            delimiter (str): Field separator, ',' by default.

        Returns:
            pd.DataFrame: one row per record, columns in file order.
        """
        if not os.path.exists(path):
            self.logger.error(f"CSVReader: File not found: {path}")
            raise FileNotFoundError(path)
        header = pd.read_csv(path, sep=delimiter, nrows=1, header=None, dtype=str, skipinitialspace=True)
        names = [str(name) for name in header.iloc[0].tolist()] if len(header) else []
        repeated = sorted({name for name in names if names.count(name) > 1})
        if repeated:
            self.logger.error(f"CSVReader: Repeated column name(s) in {path}: {repeated}")
            raise DuplicateFieldNameError(repeated)
        df = pd.read_csv(path, sep=delimiter, skipinitialspace=True)
        self.logger.info(f"CSVReader: Loaded {path}, shape: {df.shape}")

        if id_field is not None:
            if id_field not in df.columns:
                self.logger.error(f"CSVReader: Id field '{id_field}' not found in {path}. Columns: {df.columns.tolist()}")
                raise UnknownFieldError([id_field])
            if not is_integer_dtype(df[id_field]):
                self.logger.error(f"CSVReader: Id field '{id_field}' must hold integers, got dtype {df[id_field].dtype}.")
                raise ValueError(f"Id field '{id_field}' must hold integer participant ids.")
            duplicated = df.loc[df[id_field].duplicated(), id_field].tolist()
            if duplicated:
                self.logger.error(f"CSVReader: Duplicate participant ids in {path}: {duplicated}")
                raise ValueError(f"Duplicate participant ids: {duplicated}")
        return df
