from pydantic import BaseModel, Field
import uuid

def gen_id() -> str:
    return str(uuid.uuid4())

class Snapshot(BaseModel):
    """Base des objets copiés par valeur d'un écran à l'autre."""

    def snapshot(self):
        return self.model_copy(deep=True)
