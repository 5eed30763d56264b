type BlockNumber = int
type SafeHandler = str
