GITHUB_CONNECTION_ARN = "arn:aws:codestar-connections:us-east-1:864661773271:connection/e3868e91-bcdf-49d8-8e8e-05702f16c65d"

FLEET_KEY_NAME = "stackulus"
