class Config:
    def __init__(self):
        self.debug = False
        # Derive([],...) is rejected unless this is set
        self.allow_empty_outputs = False
        # anything after the closing ) is rejected unless this is set
        self.allow_trailing_data = False

config = Config()
