"""
CSV Reporter Module
------------------
Handles saving processed questionnaire tables to CSV files.
"""
import os
import pandas as pd
import logging


class CSVReporter:
    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("CSVReporter initialized.")

    def save_dataframe(self, data_df: pd.DataFrame, output_dir: str, filename: str, delimiter: str = ',') -> str:
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, filename)
        data_df.to_csv(path, index=False, sep=delimiter)
        self.logger.info(f"CSVReporter: Saved DataFrame {data_df.shape} to {path}.")
        return path
