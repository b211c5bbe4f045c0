"""sitedeploy - rsync deployments with remote backups and rollback"""

__version__ = "1.0.0"
