from dataclasses import dataclass
from typing import List
import json
import numpy as np
import pandas as pd
from scipy import stats
from sklearn.metrics import confusion_matrix, accuracy_score, cohen_kappa_score, classification_report


@dataclass
class EvaluationResult:
    name: str
    class_names: List[str]
    confusion: pd.DataFrame
    accuracy: float
    accuracy_ci: tuple
    no_information_rate: float
    p_value: float
    kappa: float
    by_class: pd.DataFrame
    report: str

    @property
    def out_of_sample_error(self):
        return 1.0 - self.accuracy

    def summary(self) -> dict:
        return {
            'accuracy': self.accuracy,
            'accuracy_ci_lower': self.accuracy_ci[0],
            'accuracy_ci_upper': self.accuracy_ci[1],
            'out_of_sample_error': self.out_of_sample_error,
            'no_information_rate': self.no_information_rate,
            'p_value_acc_gt_nir': self.p_value,
            'kappa': self.kappa,
        }

    def to_dict(self) -> dict:
        return {
            'model': self.name,
            **self.summary(),
            'class_names': list(self.class_names),
            'confusion_matrix': self.confusion.to_numpy().tolist(),
            'by_class': json.loads(self.by_class.to_json(orient='index')),
        }

    def save(self, path: str):
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def _ratio(num, den):
    return float(num) / float(den) if den else float('nan')


def per_class_statistics(cm, class_names):
    """One-vs-rest statistics for each class from a square confusion matrix (rows = true)."""
    cm = np.asarray(cm)
    total = cm.sum()
    rows = {}
    for i, class_name in enumerate(class_names):
        tp = cm[i, i]
        fn = cm[i, :].sum() - tp
        fp = cm[:, i].sum() - tp
        tn = total - tp - fn - fp
        sensitivity = _ratio(tp, tp + fn)
        specificity = _ratio(tn, tn + fp)
        rows[class_name] = {
            'sensitivity': sensitivity,
            'specificity': specificity,
            'pos_pred_value': _ratio(tp, tp + fp),
            'neg_pred_value': _ratio(tn, tn + fn),
            'prevalence': _ratio(tp + fn, total),
            'balanced_accuracy': (sensitivity + specificity) / 2,
        }
    return pd.DataFrame.from_dict(rows, orient='index')


def evaluate_model(name, y_true, y_pred, class_names=None, verbose=True):
    """
    Confusion matrix and accuracy statistics of ``y_pred`` against ``y_true``.

    The accuracy interval is the exact binomial (Clopper-Pearson) 95% interval.
    The p-value tests accuracy greater than the no-information rate, the
    share of the most frequent true class.
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if class_names is None:
        class_names = sorted(set(y_true) | set(y_pred))
    class_names = list(class_names)

    cm = confusion_matrix(y_true, y_pred, labels=class_names)
    confusion = pd.DataFrame(cm,
                             index=pd.Index(class_names, name='true'),
                             columns=pd.Index(class_names, name='predicted'))

    n = len(y_true)
    correct = int(np.trace(cm))
    accuracy = accuracy_score(y_true, y_pred)
    ci = stats.binomtest(correct, n).proportion_ci(confidence_level=0.95, method='exact')
    nir = float(cm.sum(axis=1).max() / n)
    p_value = stats.binomtest(correct, n, p=nir, alternative='greater').pvalue
    kappa = cohen_kappa_score(y_true, y_pred, labels=class_names)

    report = classification_report(y_true, y_pred, labels=class_names, zero_division=0)
    if verbose:
        print(f"\nClassification Report ({name}):")
        print(report)
        print(f"Accuracy: {accuracy:.4f} (95% CI {ci.low:.4f}-{ci.high:.4f}), "
              f"out-of-sample error: {1 - accuracy:.4f}")

    return EvaluationResult(
        name=name,
        class_names=class_names,
        confusion=confusion,
        accuracy=float(accuracy),
        accuracy_ci=(float(ci.low), float(ci.high)),
        no_information_rate=nir,
        p_value=float(p_value),
        kappa=float(kappa),
        by_class=per_class_statistics(cm, class_names),
        report=report,
    )


def compare_models(results):
    """Side by side accuracy / error summary, one row per evaluated model."""
    return pd.DataFrame([
        {
            'Model': result.name,
            'Accuracy': result.accuracy,
            'CI lower': result.accuracy_ci[0],
            'CI upper': result.accuracy_ci[1],
            'Kappa': result.kappa,
            'Out-of-sample error': result.out_of_sample_error,
        }
        for result in results
    ]).set_index('Model')
