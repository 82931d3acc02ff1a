from dataclasses import dataclass, field
from typing import List
import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from wle_report.constants import LABEL_COL, ID_COL, NA_VALUES, DROP_COLUMNS, FREQ_CUT, UNIQUE_CUT, TEST_SIZE, RANDOM_SEED


@dataclass
class CleaningSummary:
    raw_shape: tuple
    nzv_table: pd.DataFrame
    nzv_dropped: List[str] = field(default_factory=list)
    missing_dropped: List[str] = field(default_factory=list)
    id_dropped: List[str] = field(default_factory=list)
    clean_shape: tuple = None

    def as_frame(self) -> pd.DataFrame:
        """One row per cleaning step with the number of columns it removed."""
        return pd.DataFrame({
            'Step': ['Near-zero variance', 'Missing values', 'Identifiers / timestamps'],
            'Columns dropped': [len(self.nzv_dropped), len(self.missing_dropped), len(self.id_dropped)],
        })


def load_data(file_path, na_values=NA_VALUES):
    """Load data from CSV file, treating the dataset's placeholder strings as missing."""
    return pd.read_csv(file_path, na_values=na_values, keep_default_na=True, low_memory=False)


def near_zero_variance(df, freq_cut=FREQ_CUT, unique_cut=UNIQUE_CUT):
    """
    Per-column near-zero-variance diagnostics.

    A column is flagged when it holds a single distinct value, or when the most
    common value is more than ``freq_cut`` times as frequent as the runner-up and
    at most ``unique_cut`` percent of the rows carry distinct values. Missing
    values are left out of the counts.

    Returns:
        DataFrame indexed by column name with freq_ratio, percent_unique,
        zero_var and nzv
    """
    rows = {}
    n_rows = len(df)
    for col in df.columns:
        counts = df[col].value_counts(dropna=True)
        n_unique = len(counts)
        if n_unique <= 1:
            freq_ratio = 0.0
        else:
            freq_ratio = counts.iloc[0] / counts.iloc[1]
        percent_unique = 100.0 * n_unique / n_rows if n_rows else 0.0
        zero_var = n_unique <= 1
        rows[col] = {
            'freq_ratio': float(freq_ratio),
            'percent_unique': float(percent_unique),
            'zero_var': bool(zero_var),
            'nzv': bool(zero_var or (freq_ratio > freq_cut and percent_unique <= unique_cut)),
        }
    return pd.DataFrame.from_dict(rows, orient='index', columns=['freq_ratio', 'percent_unique', 'zero_var', 'nzv'])


def drop_near_zero_variance(df, exclude=(), freq_cut=FREQ_CUT, unique_cut=UNIQUE_CUT):
    candidates = [col for col in df.columns if col not in exclude]
    nzv_table = near_zero_variance(df[candidates], freq_cut=freq_cut, unique_cut=unique_cut)
    dropped = nzv_table.index[nzv_table['nzv']].tolist()
    return df.drop(columns=dropped), dropped, nzv_table


def drop_missing_columns(df):
    """Drop every column holding at least one missing value."""
    na_counts = df.isna().sum()
    dropped = na_counts[na_counts > 0].index.tolist()
    return df.drop(columns=dropped), dropped


def drop_identifier_columns(df, columns=DROP_COLUMNS):
    dropped = [col for col in columns if col in df.columns]
    return df.drop(columns=dropped), dropped


def clean_training_frame(df, label_col=LABEL_COL, drop_columns=DROP_COLUMNS,
                         freq_cut=FREQ_CUT, unique_cut=UNIQUE_CUT):
    """
    Near-zero-variance filter, missing-value filter, then identifier removal.
    The label column is never filtered and comes back as a categorical.

    Returns:
        cleaned: the cleaned observation table
        summary: CleaningSummary describing what was removed
    """
    if label_col not in df.columns:
        raise ValueError(f"Label column '{label_col}' not found in training data")

    raw_shape = df.shape
    cleaned, nzv_dropped, nzv_table = drop_near_zero_variance(
        df, exclude=(label_col,), freq_cut=freq_cut, unique_cut=unique_cut
    )
    print(f"Near-zero variance filter dropped {len(nzv_dropped)} columns")

    cleaned, missing_dropped = drop_missing_columns(cleaned.drop(columns=[label_col]))
    cleaned[label_col] = df[label_col]
    print(f"Missing-value filter dropped {len(missing_dropped)} columns")

    cleaned, id_dropped = drop_identifier_columns(cleaned, drop_columns)
    print(f"Identifier filter dropped {len(id_dropped)} columns")

    cleaned[label_col] = pd.Categorical(cleaned[label_col], categories=sorted(cleaned[label_col].dropna().unique()))
    print(f"Cleaned data shape: {cleaned.shape}")

    summary = CleaningSummary(
        raw_shape=raw_shape,
        nzv_table=nzv_table,
        nzv_dropped=nzv_dropped,
        missing_dropped=missing_dropped,
        id_dropped=id_dropped,
        clean_shape=cleaned.shape,
    )
    return cleaned, summary


def feature_columns(df, label_col=LABEL_COL):
    return [col for col in df.columns if col != label_col]


def features_labels(df, label_col=LABEL_COL):
    return df[feature_columns(df, label_col)], df[label_col]


def align_test_frame(test_df, columns, id_col=ID_COL):
    """
    Reduce the test table to the training feature columns, in training order.

    Returns:
        X_test: DataFrame with exactly ``columns``
        ids: the ``id_col`` values, or a 1-based range when the column is absent
    """
    missing = [col for col in columns if col not in test_df.columns]
    if missing:
        raise ValueError(f"Test data is missing feature columns: {missing}")

    if id_col in test_df.columns:
        ids = test_df[id_col].reset_index(drop=True)
    else:
        ids = pd.Series(np.arange(1, len(test_df) + 1), name=id_col)
    return test_df[list(columns)], ids


def split_data(df, label_col=LABEL_COL, test_size=TEST_SIZE, random_state=RANDOM_SEED):
    """Stratified train/validation split; row index labels are preserved."""
    train_df, val_df = train_test_split(
        df, test_size=test_size, random_state=random_state, stratify=df[label_col]
    )
    return train_df, val_df


def class_distribution(train_df, val_df, label_col=LABEL_COL):
    """Per-class row counts of both partitions side by side."""
    dist = pd.DataFrame({
        'train': train_df[label_col].value_counts(sort=False),
        'validation': val_df[label_col].value_counts(sort=False),
    }).fillna(0).astype(int)
    dist['total'] = dist['train'] + dist['validation']
    dist.index.name = label_col
    return dist.sort_index()
