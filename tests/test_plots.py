import os
import pandas as pd
import pytest

from wle_report.evaluation import evaluate_model
from wle_report.models import train_decision_tree, train_random_forest, feature_importance
from wle_report.plots import (
    plot_correlation_matrix,
    plot_class_distribution,
    plot_decision_tree,
    plot_feature_importance,
    plot_cv_accuracy,
    plot_confusion_matrix,
)
from wle_report.preprocessing import clean_training_frame, features_labels, split_data, class_distribution


@pytest.fixture
def cleaned(wle_frame):
    cleaned, _ = clean_training_frame(wle_frame)
    return cleaned


def assert_png(path):
    assert os.path.exists(path)
    assert os.path.getsize(path) > 0


def test_correlation_and_distribution_plots(cleaned, tmp_path):
    X, _ = features_labels(cleaned)
    train_df, val_df = split_data(cleaned)
    assert_png(plot_correlation_matrix(X, str(tmp_path / "corr.png")))
    assert_png(plot_class_distribution(class_distribution(train_df, val_df), str(tmp_path / "dist.png")))


def test_model_plots(cleaned, tmp_path):
    X, y = features_labels(cleaned)
    y = y.astype(str)
    tree = train_decision_tree(X, y, random_state=0)
    assert_png(plot_decision_tree(tree, X.columns, tree.classes_, str(tmp_path / "tree.png"), max_depth=2))

    forest, cv_results = train_random_forest(X, y, n_estimators=5, cv_folds=3, random_state=0)
    assert_png(plot_cv_accuracy(cv_results, str(tmp_path / "cv.png")))
    assert_png(plot_feature_importance(feature_importance(forest, X.columns), str(tmp_path / "imp.png"), top_n=5))


def test_confusion_matrix_plot(tmp_path):
    result = evaluate_model('rf', ['A', 'B', 'C'], ['A', 'B', 'B'], class_names=['A', 'B', 'C', 'D'], verbose=False)
    assert_png(plot_confusion_matrix(result.confusion, str(tmp_path / "cm.png"), name='rf'))


def test_cv_plot_single_candidate(tmp_path):
    cv_results = pd.DataFrame({'max_features': [3], 'mean_score': [0.9], 'std_score': [0.01], 'rank': [1]})
    assert_png(plot_cv_accuracy(cv_results, str(tmp_path / "cv.png")))
