from typing import Dict, Any, List
import wandb

from wle_report.config import Config


class WandBLogger:
    def __init__(self, config: Config, run_name: str = None):
        self.config = config
        self.wandb_config = config.as_dict()
        self.allow_artifacts = config.wandb.model_versioning

        self.run = wandb.init(
            mode=config.wandb.mode,
            entity=config.wandb.entity,
            project=config.wandb.project,
            dir=config.output_paths.run_dir,
            config=self.wandb_config,
            job_type='analysis',
            name=run_name or config.output_paths.run_id
        )

    def log_metrics(self, metrics: Dict[str, Any], step: int = None, commit: bool = True):
        """Log metrics to wandb"""
        wandb.log(metrics, step=step, commit=commit)

    def log_model_metrics(self, model_name: str, metrics: Dict[str, Any]):
        """Log model-specific metrics with proper naming"""
        prefixed_metrics = {f"{model_name}/{k}": v for k, v in metrics.items()}
        self.log_metrics(prefixed_metrics)

    def log_plot(self, plot_name: str, figure_path: str):
        """Log a saved figure to wandb"""
        wandb.log({plot_name: wandb.Image(figure_path)})

    def log_table(self, table_name: str, df):
        wandb.log({table_name: wandb.Table(dataframe=df)})

    def log_model_artifact(self, model_name: str, model_path: str):
        """
        Log a pickled model as a wandb artifact.

        Args:
            model_name: Name of the model (will be sanitized for wandb)
            model_path: Path to the saved model file
        """
        if not self.allow_artifacts:
            return
        # only alphanumeric, dashes, underscores, and dots allowed
        artifact_name = f"{model_name.lower().replace(' ', '_')}_model"

        artifact = wandb.Artifact(
            name=artifact_name,
            type="model",
            description=f"Trained {model_name} model"
        )
        artifact.add_file(model_path)
        wandb.log_artifact(artifact)

    def log_confusion_matrix(self, model_name: str, y_true, y_pred, class_names: List[str]):
        """Log confusion matrix for a model"""
        index = {name: i for i, name in enumerate(class_names)}
        wandb.log({
            f"{model_name}/confusion_matrix": wandb.plot.confusion_matrix(
                probs=None,
                y_true=[index[label] for label in y_true],
                preds=[index[label] for label in y_pred],
                class_names=[str(name) for name in class_names]
            )
        })

    def finish(self):
        """Finish the wandb run"""
        wandb.finish()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()
