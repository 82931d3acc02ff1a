from dataclasses import dataclass, field
from typing import List, Optional, Literal
import yaml
import os
from datetime import datetime

from wle_report.constants import (
    TRAIN_URL, TEST_URL, LABEL_COL, ID_COL, NA_VALUES, DROP_COLUMNS,
    FREQ_CUT, UNIQUE_CUT, TEST_SIZE, CV_FOLDS, TUNE_LENGTH, N_ESTIMATORS, RANDOM_SEED,
)


@dataclass
class DataConfig:
    train_url: str = TRAIN_URL
    test_url: str = TEST_URL
    raw_dir: str = "raw_data/"
    label_col: str = LABEL_COL
    id_col: str = ID_COL
    na_values: List[str] = field(default_factory=lambda: list(NA_VALUES))
    drop_columns: List[str] = field(default_factory=lambda: list(DROP_COLUMNS))
    test_size: float = TEST_SIZE
    freq_cut: float = FREQ_CUT
    unique_cut: float = UNIQUE_CUT

    def __post_init__(self):
        """Validate configuration parameters"""
        if not 0 < self.test_size < 1:
            raise ValueError("test_size must be between 0 and 1")
        if self.freq_cut <= 1:
            raise ValueError("freq_cut must be greater than 1")
        if not 0 <= self.unique_cut <= 100:
            raise ValueError("unique_cut must be a percentage between 0 and 100")

    @property
    def train_path(self):
        return os.path.join(self.raw_dir, os.path.basename(self.train_url))

    @property
    def test_path(self):
        return os.path.join(self.raw_dir, os.path.basename(self.test_url))


@dataclass
class TreeConfig:
    criterion: Literal["gini", "entropy", "log_loss"] = "gini"
    max_depth: Optional[int] = None
    min_samples_split: int = 20
    min_samples_leaf: int = 7
    ccp_alpha: float = 0.0
    plot_max_depth: int = 4

    def __post_init__(self):
        valid_criteria = {"gini", "entropy", "log_loss"}
        if self.criterion not in valid_criteria:
            raise ValueError(f"criterion must be one of {valid_criteria}")
        if self.max_depth is not None and self.max_depth <= 0:
            raise ValueError("max_depth must be greater than 0")


@dataclass
class RFConfig:
    n_estimators: int = N_ESTIMATORS
    cv_folds: int = CV_FOLDS
    tune_length: int = TUNE_LENGTH
    n_jobs: Optional[int] = None
    scoring: str = "accuracy"

    def __post_init__(self):
        if self.n_estimators <= 0:
            raise ValueError("n_estimators must be greater than 0")
        if self.cv_folds < 2:
            raise ValueError("cv_folds must be at least 2")
        if self.tune_length < 1:
            raise ValueError("tune_length must be at least 1")


@dataclass
class WandBConfig:
    mode: str = "disabled"
    entity: Optional[str] = None
    project: str = "wle-report"
    model_versioning: bool = False

    def __post_init__(self):
        valid_modes = {"online", "offline", "disabled"}
        if self.mode not in valid_modes:
            raise ValueError(f"wandb mode must be one of {valid_modes}")


@dataclass
class OutputPathsConfig:
    base_path: str
    run_id: str = None

    def __post_init__(self):
        if not os.path.exists(self.base_path):
            os.makedirs(self.base_path)

        if not self.run_id:
            self.run_id = datetime.now().strftime("%Y%m%d_%H%M%S")

        # Create run directory structure
        self.run_dir = os.path.join(self.base_path, f"run_{self.run_id}")
        self.plots_dir = os.path.join(self.run_dir, "plots")
        self.models_dir = os.path.join(self.run_dir, "models")
        self.metrics_dir = os.path.join(self.run_dir, "metrics")

        for dir_path in [self.run_dir, self.plots_dir, self.models_dir, self.metrics_dir]:
            os.makedirs(dir_path, exist_ok=True)

    def get_plot_path(self, plot_name: str, model_name: str = None) -> str:
        """Get path for a specific plot"""
        if model_name:
            plot_name = f"{model_name}_{plot_name}"
        return os.path.join(self.plots_dir, f"{plot_name}.png")

    def get_model_path(self, model_name: str) -> str:
        """Get path for saving a fitted model"""
        return os.path.join(self.models_dir, f"{model_name}.pkl")

    def get_metrics_path(self, model_name: str) -> str:
        """Get path for saving model metrics"""
        return os.path.join(self.metrics_dir, f"{model_name}_metrics.json")

    @property
    def report_path(self) -> str:
        return os.path.join(self.run_dir, "report.md")

    @property
    def predictions_path(self) -> str:
        return os.path.join(self.run_dir, "predictions.csv")


@dataclass
class Config:
    output_paths: OutputPathsConfig
    data: DataConfig = field(default_factory=DataConfig)
    decision_tree: TreeConfig = field(default_factory=TreeConfig)
    random_forest: RFConfig = field(default_factory=RFConfig)
    wandb: WandBConfig = field(default_factory=WandBConfig)
    random_seed: int = RANDOM_SEED
    file_path: Optional[str] = None

    @classmethod
    def from_yaml(cls, yaml_path: str, run_id: str = None) -> 'Config':
        if not os.path.exists(yaml_path):
            raise FileNotFoundError(f"Config file {yaml_path} does not exist.")

        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}

        if 'base_output_dir' not in config_dict:
            raise ValueError(f"No 'base_output_dir' found in {yaml_path}")

        output_paths = OutputPathsConfig(base_path=config_dict['base_output_dir'], run_id=run_id)

        return cls(
            output_paths=output_paths,
            data=DataConfig(**(config_dict.get('data') or {})),
            decision_tree=TreeConfig(**(config_dict.get('decision_tree') or {})),
            random_forest=RFConfig(**(config_dict.get('random_forest') or {})),
            wandb=WandBConfig(**(config_dict.get('wandb') or {})),
            random_seed=config_dict.get('random_seed', RANDOM_SEED),
            file_path=yaml_path,
        )

    def get_tree_params(self):
        return {
            'criterion': self.decision_tree.criterion,
            'max_depth': self.decision_tree.max_depth,
            'min_samples_split': self.decision_tree.min_samples_split,
            'min_samples_leaf': self.decision_tree.min_samples_leaf,
            'ccp_alpha': self.decision_tree.ccp_alpha,
            'random_state': self.random_seed,
        }

    def get_forest_params(self):
        return {
            'n_estimators': self.random_forest.n_estimators,
            'cv_folds': self.random_forest.cv_folds,
            'tune_length': self.random_forest.tune_length,
            'n_jobs': self.random_forest.n_jobs,
            'scoring': self.random_forest.scoring,
            'random_state': self.random_seed,
        }

    def as_dict(self):
        return {
            'data': self.data.__dict__,
            'decision_tree': self.decision_tree.__dict__,
            'random_forest': self.random_forest.__dict__,
            'random_seed': self.random_seed,
        }
