RANDOM_SEED = 42

# ===== Raw Data =====
URL_BASE = "https://d396qusza40orc.cloudfront.net/predmachlearn/"
TRAIN_URL = URL_BASE + "pml-training.csv"
TEST_URL = URL_BASE + "pml-testing.csv"

## dataframe processing
LABEL_COL = 'classe'
ID_COL = 'problem_id'
NA_VALUES = ["NA", "#DIV/0!", ""]

# bookkeeping columns, not sensor readings
DROP_COLUMNS = ['X', 'user_name', 'raw_timestamp_part_1', 'raw_timestamp_part_2',
                'cvtd_timestamp', 'new_window', 'num_window']

## near zero variance
FREQ_CUT = 95 / 5
UNIQUE_CUT = 10.0

# ===== Model Training =====
TEST_SIZE = 0.2
CV_FOLDS = 5
TUNE_LENGTH = 3
N_ESTIMATORS = 100
