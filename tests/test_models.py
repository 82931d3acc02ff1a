import numpy as np
import pytest

from wle_report.models import (
    max_features_grid,
    train_decision_tree,
    train_random_forest,
    feature_importance,
    predict_test,
)
from wle_report.preprocessing import clean_training_frame, features_labels, align_test_frame


@pytest.fixture
def xy(wle_frame):
    cleaned, _ = clean_training_frame(wle_frame)
    X, y = features_labels(cleaned)
    return X, y.astype(str)


@pytest.mark.parametrize("n_features, tune_length, expected", [
    (52, 3, [2, 27, 52]),
    (10, 1, [3]),
    (5, 10, [2, 3, 4, 5]),
    (2, 3, [2]),
    (1, 3, [1]),
])
def test_max_features_grid(n_features, tune_length, expected):
    assert max_features_grid(n_features, tune_length) == expected


def test_max_features_grid_rejects_empty():
    with pytest.raises(ValueError):
        max_features_grid(0)


def test_train_decision_tree(xy):
    X, y = xy
    model = train_decision_tree(X, y, min_samples_split=4, min_samples_leaf=2, random_state=0)
    assert set(model.classes_) == set(y)
    assert model.score(X, y) > 0.9


def test_train_random_forest(xy):
    X, y = xy
    model, cv_results = train_random_forest(X, y, n_estimators=10, cv_folds=3, tune_length=3, random_state=0)

    grid = max_features_grid(X.shape[1], 3)
    assert cv_results['max_features'].tolist() == grid
    assert (cv_results['rank'] == 1).any()
    assert cv_results['mean_score'].between(0, 1).all()
    best = cv_results.loc[cv_results['rank'] == 1, 'max_features'].iloc[0]
    assert model.max_features == best
    assert model.n_estimators == 10


def test_feature_importance(xy):
    X, y = xy
    model, _ = train_random_forest(X, y, n_estimators=10, cv_folds=3, tune_length=1, random_state=0)
    importance = feature_importance(model, X.columns)

    assert set(importance['Feature']) == set(X.columns)
    assert importance['Importance'].sum() == pytest.approx(1.0)
    assert importance['Importance'].is_monotonic_decreasing
    assert len(feature_importance(model, X.columns, top_n=3)) == 3


def test_predict_test(xy, wle_test_frame):
    X, y = xy
    model = train_decision_tree(X, y, random_state=0)
    X_test, ids = align_test_frame(wle_test_frame, X.columns)
    predictions = predict_test(model, X_test, ids)

    assert len(predictions) == len(wle_test_frame)
    assert list(predictions.columns) == ['problem_id', 'prediction']
    assert set(predictions['prediction']) <= set(np.unique(y))
