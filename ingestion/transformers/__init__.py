from ingestion.transformers.train_mapper import TrainFormationMapper

__all__ = ["TrainFormationMapper"]
