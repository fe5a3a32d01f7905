from distillpress import db
from datetime import datetime

class UsageLogEntry(db.Model):
    __tablename__ = 'api_log'

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    action_type = db.Column(db.String(32), nullable=False)  # chat_completion | chat_with_system
    model = db.Column(db.String(100), nullable=False)
    cost_points = db.Column(db.Integer, nullable=True)
    prompt_tokens = db.Column(db.Integer, nullable=True)
    completion_tokens = db.Column(db.Integer, nullable=True)
    total_tokens = db.Column(db.Integer, nullable=True)

    def to_dict(self):
        return {
            'timestamp': self.created_at.strftime('%Y-%m-%d %H:%M:%S') if self.created_at else None,
            'action_type': self.action_type,
            'model': self.model,
            'cost_points': self.cost_points,
            'prompt_tokens': self.prompt_tokens,
            'completion_tokens': self.completion_tokens,
            'total_tokens': self.total_tokens,
        }
