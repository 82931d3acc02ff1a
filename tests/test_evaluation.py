import json
import numpy as np
import pytest

from wle_report.evaluation import evaluate_model, per_class_statistics, compare_models


def test_perfect_predictions():
    y = ['A', 'B', 'C', 'A', 'B', 'C']
    result = evaluate_model('perfect', y, y, verbose=False)

    assert result.accuracy == 1.0
    assert result.out_of_sample_error == 0.0
    assert np.array_equal(result.confusion.to_numpy(), np.diag([2, 2, 2]))
    assert result.kappa == pytest.approx(1.0)


def test_known_confusion_matrix():
    y_true = ['A', 'A', 'B', 'B']
    y_pred = ['A', 'B', 'B', 'B']
    result = evaluate_model('known', y_true, y_pred, class_names=['A', 'B'], verbose=False)

    assert result.confusion.loc['A'].tolist() == [1, 1]
    assert result.confusion.loc['B'].tolist() == [0, 2]
    assert result.accuracy == pytest.approx(0.75)
    assert result.out_of_sample_error == pytest.approx(0.25)
    assert result.no_information_rate == pytest.approx(0.5)
    assert 0 <= result.accuracy_ci[0] < 0.75 < result.accuracy_ci[1] <= 1
    assert 0 <= result.p_value <= 1

    by_class = result.by_class
    assert by_class.loc['A', 'sensitivity'] == pytest.approx(0.5)
    assert by_class.loc['A', 'specificity'] == pytest.approx(1.0)
    assert by_class.loc['B', 'pos_pred_value'] == pytest.approx(2 / 3)
    assert by_class.loc['B', 'prevalence'] == pytest.approx(0.5)
    assert by_class.loc['A', 'balanced_accuracy'] == pytest.approx(0.75)


def test_confusion_matrix_keeps_unpredicted_classes():
    result = evaluate_model('partial', ['A', 'B', 'C'], ['A', 'A', 'A'],
                            class_names=['A', 'B', 'C', 'D'], verbose=False)
    assert result.confusion.shape == (4, 4)
    assert result.confusion.to_numpy().sum() == 3
    assert np.isnan(result.by_class.loc['D', 'sensitivity'])


def test_per_class_statistics_rows():
    stats = per_class_statistics(np.array([[3, 1], [2, 4]]), ['x', 'y'])
    assert list(stats.index) == ['x', 'y']
    assert stats.loc['x', 'neg_pred_value'] == pytest.approx(4 / 5)


def test_result_serialises(tmp_path):
    result = evaluate_model('rf', ['A', 'B', 'B'], ['A', 'B', 'A'], verbose=False)
    path = tmp_path / "rf_metrics.json"
    result.save(str(path))

    saved = json.loads(path.read_text())
    assert saved['model'] == 'rf'
    assert saved['confusion_matrix'] == [[1, 0], [1, 1]]
    assert saved['out_of_sample_error'] == pytest.approx(1 / 3)
    assert set(saved['by_class']) == {'A', 'B'}


def test_compare_models():
    tree = evaluate_model('decision_tree', ['A', 'B'], ['A', 'A'], verbose=False)
    forest = evaluate_model('random_forest', ['A', 'B'], ['A', 'B'], verbose=False)
    table = compare_models([tree, forest])

    assert list(table.index) == ['decision_tree', 'random_forest']
    assert table.loc['random_forest', 'Accuracy'] == 1.0
    assert table.loc['decision_tree', 'Out-of-sample error'] == pytest.approx(0.5)
    assert table['Accuracy'].between(0, 1).all()
