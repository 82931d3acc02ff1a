import numpy as np
import pandas as pd
from sklearn.tree import DecisionTreeClassifier
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import GridSearchCV, StratifiedKFold

from wle_report.constants import RANDOM_SEED, CV_FOLDS, TUNE_LENGTH, N_ESTIMATORS


def max_features_grid(n_features, tune_length=TUNE_LENGTH):
    """
    Candidate numbers of features tried at each split.

    ``tune_length`` values spread evenly from 2 to ``n_features``, floored and
    de-duplicated; a single ``floor(sqrt(n_features))`` when ``tune_length`` is 1.
    """
    if n_features < 1:
        raise ValueError("n_features must be at least 1")
    if tune_length == 1 or n_features == 1:
        return [max(1, int(np.floor(np.sqrt(n_features))))]
    grid = np.floor(np.linspace(2, n_features, tune_length)).astype(int)
    return sorted(set(grid.tolist()))


def train_decision_tree(X, y, criterion="gini", max_depth=None, min_samples_split=20,
                        min_samples_leaf=7, ccp_alpha=0.0, random_state=RANDOM_SEED):
    print("Training Decision Tree...")
    tree_model = DecisionTreeClassifier(
        criterion=criterion,
        max_depth=max_depth,
        min_samples_split=min_samples_split,
        min_samples_leaf=min_samples_leaf,
        ccp_alpha=ccp_alpha,
        random_state=random_state,
    )
    tree_model.fit(X, y)
    print(f"Tree depth: {tree_model.get_depth()}, leaves: {tree_model.get_n_leaves()}")
    return tree_model


def train_random_forest(X, y, n_estimators=N_ESTIMATORS, cv_folds=CV_FOLDS, tune_length=TUNE_LENGTH,
                        n_jobs=None, scoring="accuracy", random_state=RANDOM_SEED):
    """
    Train a Random Forest, choosing ``max_features`` by stratified k-fold
    cross-validation. The winning setting is refit on all of ``X``.

    Returns:
        best_model: fitted RandomForestClassifier
        cv_results: DataFrame with one row per candidate ``max_features``
    """
    param_grid = {'max_features': max_features_grid(X.shape[1], tune_length)}

    base_rf = RandomForestClassifier(
        n_estimators=n_estimators,
        random_state=random_state,
        n_jobs=n_jobs,
    )

    grid_search = GridSearchCV(
        estimator=base_rf,
        param_grid=param_grid,
        scoring=scoring,
        cv=StratifiedKFold(n_splits=cv_folds, shuffle=True, random_state=random_state),
        verbose=1,
        error_score='raise',
    )

    print(f"Starting {cv_folds}-fold cross-validation over max_features={param_grid['max_features']}...")
    grid_search.fit(X, y)

    print("\nBest parameters found:")
    print(grid_search.best_params_)
    print("\nBest cross-validation score:")
    print(f"{scoring}: {grid_search.best_score_:.4f}")

    return grid_search.best_estimator_, cv_results_frame(grid_search)


def cv_results_frame(grid_search):
    results = grid_search.cv_results_
    return pd.DataFrame({
        'max_features': [params['max_features'] for params in results['params']],
        'mean_score': results['mean_test_score'],
        'std_score': results['std_test_score'],
        'rank': results['rank_test_score'],
    })


def feature_importance(model, feature_names, top_n=None):
    importance = pd.DataFrame({
        'Feature': list(feature_names),
        'Importance': model.feature_importances_
    }).sort_values('Importance', ascending=False).reset_index(drop=True)
    if top_n is not None:
        importance = importance.head(top_n)
    return importance


def predict_test(model, X_test, ids, id_col="problem_id"):
    """Predicted label for every test row, keyed by ``id_col``."""
    predictions = model.predict(X_test)
    return pd.DataFrame({id_col: ids.to_numpy(), 'prediction': predictions})
