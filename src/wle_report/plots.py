import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.tree import plot_tree


def plot_correlation_matrix(X, path):
    """Pearson correlation between every pair of numeric features."""
    corr = X.select_dtypes(include=[np.number]).corr()
    n = len(corr)
    size = max(8, n * 0.22)

    plt.figure(figsize=(size, size))
    sns.heatmap(corr, cmap='RdBu_r', center=0, vmin=-1, vmax=1, square=True,
                xticklabels=True, yticklabels=True,
                cbar_kws={'shrink': 0.6})
    plt.xticks(fontsize=6, rotation=90)
    plt.yticks(fontsize=6)
    plt.title("Feature Correlation Matrix")
    plt.tight_layout()
    plt.savefig(path, bbox_inches='tight', dpi=150)
    plt.close()
    return path


def plot_class_distribution(distribution, path, label_col='classe'):
    """Bar chart of per-class counts for each partition column of ``distribution``."""
    partitions = [col for col in distribution.columns if col != 'total']
    x_col = distribution.index.name or 'index'
    long_df = distribution[partitions].reset_index().melt(id_vars=x_col, var_name='Partition', value_name='Count')

    plt.figure(figsize=(10, 6))
    sns.barplot(x=x_col, y='Count', hue='Partition', data=long_df)
    plt.title("Class Distribution")
    plt.xlabel(label_col)
    plt.ylabel("Samples")
    plt.tight_layout()
    plt.savefig(path, bbox_inches='tight', dpi=150)
    plt.close()
    return path


def plot_decision_tree(model, feature_names, class_names, path, max_depth=4):
    fig, ax = plt.subplots(figsize=(24, 12))
    plot_tree(model,
              feature_names=list(feature_names),
              class_names=[str(c) for c in class_names],
              max_depth=max_depth,
              filled=True,
              rounded=True,
              impurity=False,
              proportion=True,
              fontsize=7,
              ax=ax)
    ax.set_title(f"Decision Tree (first {max_depth} levels)")
    plt.tight_layout()
    plt.savefig(path, bbox_inches='tight', dpi=150)
    plt.close(fig)
    return path


def plot_feature_importance(importance, path, top_n=20):
    top = importance.head(top_n)

    plt.figure(figsize=(10, max(4, 0.35 * len(top))))
    sns.barplot(x='Importance', y='Feature', data=top, color='steelblue')
    plt.title(f"Random Forest Feature Importance (top {len(top)})")
    plt.xlabel("Mean decrease in impurity")
    plt.ylabel("")
    plt.tight_layout()
    plt.savefig(path, bbox_inches='tight', dpi=150)
    plt.close()
    return path


def plot_cv_accuracy(cv_results, path, scoring='accuracy'):
    """Cross-validated score of every ``max_features`` candidate, with one-std error bars."""
    results = cv_results.sort_values('max_features')
    best = results.loc[results['rank'] == 1].iloc[0]

    plt.figure(figsize=(8, 5))
    plt.errorbar(results['max_features'], results['mean_score'], yerr=results['std_score'],
                 fmt='o-', capsize=4, color='steelblue', label='CV mean')
    plt.scatter([best['max_features']], [best['mean_score']], s=120, facecolors='none',
                edgecolors='red', linewidths=2, label='selected', zorder=3)
    plt.xlabel("Randomly selected features per split (max_features)")
    plt.ylabel(f"{scoring} (cross-validation)")
    plt.title("Random Forest Cross-Validation")
    plt.grid(True, alpha=0.3)
    plt.legend(loc='lower right')
    plt.tight_layout()
    plt.savefig(path, bbox_inches='tight', dpi=150)
    plt.close()
    return path


def plot_confusion_matrix(confusion, path, name="model"):
    """Raw-count and row-normalised heatmaps of a labelled confusion matrix."""
    cm = confusion.to_numpy()
    row_sums = cm.sum(axis=1, keepdims=True)
    cm_norm = np.divide(cm, row_sums, out=np.zeros(cm.shape, dtype=float), where=row_sums != 0)
    class_names = [str(c) for c in confusion.index]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

    # Raw counts
    sns.heatmap(cm, annot=True, fmt='d', cmap='Blues',
                xticklabels=class_names,
                yticklabels=class_names, ax=ax1,
                annot_kws={'size': 8})
    ax1.set_xlabel('Predicted')
    ax1.set_ylabel('True')
    ax1.set_title(f'{name}: Confusion Matrix (Raw Counts)')

    # Normalized values
    sns.heatmap(cm_norm, annot=True, fmt='.1%', cmap='Blues',
                xticklabels=class_names,
                yticklabels=class_names, ax=ax2,
                annot_kws={'size': 8})
    ax2.set_xlabel('Predicted')
    ax2.set_ylabel('True')
    ax2.set_title(f'{name}: Normalized by True Label')

    plt.tight_layout()
    plt.savefig(path, bbox_inches='tight', dpi=150)
    plt.close(fig)
    return path

