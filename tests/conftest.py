import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

CLASSES = ['A', 'B', 'C', 'D', 'E']
USERS = ['adelmo', 'carlitos', 'charles', 'eurico', 'jeremy', 'pedro']
SENSORS = ['roll_belt', 'pitch_belt', 'yaw_belt', 'total_accel_belt',
           'accel_arm_x', 'accel_arm_y', 'magnet_dumbbell_z', 'roll_forearm']


def make_wle_frame(n_per_class=40, seed=0):
    """Small frame with the columns and quirks of the WLE training CSV."""
    rng = np.random.default_rng(seed)
    labels = np.repeat(CLASSES, n_per_class)
    n = len(labels)
    class_idx = np.repeat(np.arange(len(CLASSES)), n_per_class)
    new_window = np.where(np.arange(n) % 50 == 49, 'yes', 'no')

    data = {
        'X': np.arange(1, n + 1),
        'user_name': rng.choice(USERS, n),
        'raw_timestamp_part_1': 1322489729 + np.arange(n),
        'raw_timestamp_part_2': rng.integers(0, 999999, n),
        'cvtd_timestamp': [f"28/11/2011 14:{m:02d}" for m in np.arange(n) % 12],
        'new_window': new_window,
        'num_window': np.arange(n) // 4 + 1,
    }
    for j, sensor in enumerate(SENSORS):
        data[sensor] = class_idx * (j + 1) * 2.0 + rng.normal(0, 1.0, n)
    # summary statistics only filled on window boundaries
    data['max_roll_belt'] = np.where(new_window == 'yes', rng.normal(0, 1, n), np.nan)
    data['amplitude_yaw_belt'] = np.where(new_window == 'yes', 0.0, np.nan)
    data['gyros_forearm_flag'] = np.where(np.arange(n) == 3, 1.0, 0.0)
    data['classe'] = labels
    return pd.DataFrame(data)


def make_test_frame(train_df, n=20, seed=1):
    test_df = train_df.drop(columns=['classe']).sample(n=n, random_state=seed).reset_index(drop=True)
    test_df['problem_id'] = np.arange(1, n + 1)
    return test_df


@pytest.fixture
def wle_frame():
    return make_wle_frame()


@pytest.fixture
def wle_test_frame(wle_frame):
    return make_test_frame(wle_frame)


@pytest.fixture
def raw_csvs(tmp_path, wle_frame, wle_test_frame):
    raw_dir = tmp_path / "raw"
    raw_dir.mkdir()
    train = wle_frame.copy()
    # spreadsheet division errors in the original export
    train['max_roll_belt'] = train['max_roll_belt'].astype(object).where(train['new_window'] == 'yes', '#DIV/0!')
    train.to_csv(raw_dir / "pml-training.csv", index=False)
    wle_test_frame.to_csv(raw_dir / "pml-testing.csv", index=False)
    return raw_dir
