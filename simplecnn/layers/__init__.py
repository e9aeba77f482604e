from .Layer import Layer
from .ConvolutionLayer import ConvolutionLayer
from .MaxPoolingLayer import MaxPoolingLayer
from .FlattenLayer import FlattenLayer
from .DenseLayer import DenseLayer

__all__ = [
    "Layer",
    "ConvolutionLayer",
    "MaxPoolingLayer",
    "FlattenLayer",
    "DenseLayer",
]
